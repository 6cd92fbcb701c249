from __future__ import annotations

from enum import StrEnum

from pydantic import AliasChoices, Field

from .common import GraphResource


class AssignmentFilterPlatform(StrEnum):
    UNKNOWN = "unknown"
    ANDROID = "android"
    IOS = "iOS"
    MACOS = "macOS"
    WINDOWS = "windows"
    WINDOWS10_AND_LATER = "windows10AndLater"
    ANDROID_FOR_WORK = "androidForWork"
    ANDROID_AOSP = "androidAOSP"

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            normalised = value.lower()
            for member in cls:
                if member.value.lower() == normalised:
                    return member
            return cls.UNKNOWN
        return None


class AssignmentFilter(GraphResource):
    display_name: str = Field(
        alias="displayName",
        validation_alias=AliasChoices("displayName", "name"),
    )
    description: str | None = None
    platform: AssignmentFilterPlatform | None = None
    rule: str | None = Field(default=None, alias="rule")


__all__ = ["AssignmentFilter", "AssignmentFilterPlatform"]
