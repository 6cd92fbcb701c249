from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Callable

from intune_insight.cli import build_parser, run


def _args(snapshot: Path, env_file: Path, *extra: str) -> list[str]:
    return [str(snapshot), "--no-log-file", "--env-file", str(env_file), *extra]


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["snapshot.json"])

    assert args.format == "json"
    assert args.extended is None
    assert args.log_file is True


def test_run_prints_json_report(write_snapshot: Callable[..., Path], env_file: Path) -> None:
    out = io.StringIO()

    code = run(_args(write_snapshot(), env_file, "--extended"), stdout=out)

    assert code == 0
    payload = json.loads(out.getvalue())
    assert payload["device"]["id"] == "device-1"
    assert payload["conflicts"]["conflicts"]


def test_run_writes_csv_output(
    write_snapshot: Callable[..., Path],
    env_file: Path,
    tmp_path: Path,
) -> None:
    output = tmp_path / "rows.csv"

    code = run(_args(write_snapshot(), env_file, "--format", "csv", "--output", str(output)))

    assert code == 0
    assert output.read_text(encoding="utf-8").startswith("asset")


def test_run_reports_unreadable_snapshot(tmp_path: Path, env_file: Path, capsys) -> None:
    code = run(_args(tmp_path / "missing.json", env_file))

    assert code == 1
    assert "Could not read the device snapshot." in capsys.readouterr().err


def test_run_reports_undecodable_snapshot(tmp_path: Path, env_file: Path, capsys) -> None:
    snapshot = tmp_path / "latin.json"
    snapshot.write_bytes(b'{"device": {"id": "\xff\xfe"}}')

    code = run(_args(snapshot, env_file))

    assert code == 1
    assert "The device snapshot is malformed." in capsys.readouterr().err


def test_run_writes_conflicts_beside_extended_csv(
    write_snapshot: Callable[..., Path],
    env_file: Path,
    tmp_path: Path,
) -> None:
    output = tmp_path / "rows.csv"

    code = run(
        _args(
            write_snapshot(), env_file, "--extended", "--format", "csv", "--output", str(output)
        )
    )

    assert code == 0
    conflicts = (tmp_path / "rows.conflicts.csv").read_text(encoding="utf-8")
    assert "policy-a" in conflicts
    assert "policy-b" in conflicts
    assert "Conflict" in conflicts
