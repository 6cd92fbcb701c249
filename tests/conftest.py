from __future__ import annotations

import json
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Callable

import pytest

from intune_insight.config.settings import ENV_PREFIX
from intune_insight.utils import LoggingOptions, configure_logging
from tests.factories import snapshot_payload


@pytest.fixture(autouse=True)
def _console_logging() -> None:
    """Route logs to the current stderr and never to the rotating log file."""

    configure_logging(LoggingOptions(level="DEBUG", file_sink=False))


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def env_file(tmp_path: Path) -> Path:
    return tmp_path / "settings.env"


@pytest.fixture
def write_snapshot(tmp_path: Path) -> Callable[..., Path]:
    """Write a snapshot document (default payload unless given) to disk."""

    def _write(payload: Any = None, name: str = "snapshot.json") -> Path:
        path = tmp_path / name
        document = snapshot_payload() if payload is None else payload
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write
