from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from dotenv import load_dotenv
from platformdirs import user_cache_dir, user_config_dir

APP_NAME = "IntuneInsight"
ENV_PREFIX = "INTUNE_INSIGHT_"
ENV_FILE_NAME = "settings.env"

# Settings whose values merge across policies instead of overriding each other.
# Matched case-insensitively against the setting display name or definition id.
DEFAULT_ADDITIVE_SETTINGS: tuple[str, ...] = (
    "Excluded Paths",
    "Excluded Extensions",
    "Excluded Processes",
    "Attack Surface Reduction Only Exclusions",
    "Controlled Folder Access Allowed Applications",
    "Controlled Folder Access Protected Folders",
    "device_vendor_msft_policy_config_defender_excludedpaths",
    "device_vendor_msft_policy_config_defender_excludedextensions",
    "device_vendor_msft_policy_config_defender_excludedprocesses",
    "device_vendor_msft_policy_config_defender_attacksurfacereductiononlyexclusions",
    "device_vendor_msft_policy_config_defender_controlledfolderaccessallowedapplications",
    "device_vendor_msft_policy_config_defender_controlledfolderaccessprotectedfolders",
)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def config_dir() -> Path:
    path = Path(user_config_dir(APP_NAME, roaming=True))
    path.mkdir(parents=True, exist_ok=True)
    return path


def cache_dir() -> Path:
    path = Path(user_cache_dir(APP_NAME))
    path.mkdir(parents=True, exist_ok=True)
    return path


def log_dir() -> Path:
    path = cache_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _env_file_path(explicit: Path | None) -> Path:
    if explicit is not None:
        return explicit
    return config_dir() / ENV_FILE_NAME


@dataclass(slots=True)
class Settings:
    """Runtime options for device resolution runs."""

    log_level: str = "INFO"
    extended_report: bool = False
    additive_settings: list[str] = field(
        default_factory=lambda: list(DEFAULT_ADDITIVE_SETTINGS)
    )
    log_path: Path | None = None

    def configured_additive_settings(self) -> Iterable[str]:
        """Return deduplicated additive names preserving order (includes defaults)."""

        merged: list[str] = list(self.additive_settings) + [
            name for name in DEFAULT_ADDITIVE_SETTINGS if name not in self.additive_settings
        ]
        seen = set[str]()
        for name in merged:
            key = name.strip().lower()
            if key and key not in seen:
                seen.add(key)
                yield name.strip()


class SettingsManager:
    """Load and persist settings with environment overrides."""

    def __init__(self, env_file: Path | None = None) -> None:
        self._env_file = _env_file_path(env_file)

    @property
    def env_file(self) -> Path:
        return self._env_file

    def load(self) -> Settings:
        """Load settings from environment, falling back to the persisted file."""
        load_dotenv(self._env_file, override=False)

        settings = Settings()

        log_level = self._get_env("LOG_LEVEL")
        if log_level:
            settings.log_level = log_level.upper()

        extended = self._get_env("EXTENDED_REPORT")
        if extended is not None:
            settings.extended_report = extended.strip().lower() in _TRUE_VALUES

        additive = self._get_list_from_env("ADDITIVE_SETTINGS")
        if additive:
            settings.additive_settings = additive

        log_path = self._get_env("LOG_PATH")
        if log_path:
            settings.log_path = Path(log_path).expanduser()

        return settings

    def save(self, settings: Settings) -> None:
        """Persist configuration fields to the managed env file."""
        self._env_file.parent.mkdir(parents=True, exist_ok=True)
        content = [
            f"{ENV_PREFIX}LOG_LEVEL={settings.log_level}",
            f"{ENV_PREFIX}EXTENDED_REPORT={'true' if settings.extended_report else 'false'}",
            f"{ENV_PREFIX}ADDITIVE_SETTINGS={';'.join(settings.configured_additive_settings())}",
            f"{ENV_PREFIX}LOG_PATH={settings.log_path or ''}",
        ]
        self._env_file.write_text("\n".join(content) + "\n", encoding="utf-8")

    def _get_env(self, name: str) -> str | None:
        return os.getenv(f"{ENV_PREFIX}{name}") or None

    def _get_list_from_env(self, name: str) -> list[str] | None:
        raw = self._get_env(name)
        if not raw:
            return None
        values = [item.strip() for item in raw.split(";") if item.strip()]
        return values or None


__all__ = [
    "DEFAULT_ADDITIVE_SETTINGS",
    "Settings",
    "SettingsManager",
    "cache_dir",
    "config_dir",
    "log_dir",
]
