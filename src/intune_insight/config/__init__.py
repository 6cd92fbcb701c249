"""Configuration helpers for intune-insight."""

from .settings import DEFAULT_ADDITIVE_SETTINGS, Settings, SettingsManager

__all__ = [
    "DEFAULT_ADDITIVE_SETTINGS",
    "Settings",
    "SettingsManager",
]
