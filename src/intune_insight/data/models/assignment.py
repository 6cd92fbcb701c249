from __future__ import annotations

from enum import StrEnum
from typing import Any, ClassVar, Literal

from pydantic import Field, ValidationError, field_validator

from .common import GraphBaseModel

ALL_USERS_ODATA_TYPE = "#microsoft.graph.allLicensedUsersAssignmentTarget"
ALL_DEVICES_ODATA_TYPE = "#microsoft.graph.allDevicesAssignmentTarget"
GROUP_INCLUDE_ODATA_TYPE = "#microsoft.graph.groupAssignmentTarget"
GROUP_EXCLUDE_ODATA_TYPE = "#microsoft.graph.exclusionGroupAssignmentTarget"


class AssignmentFilterType(StrEnum):
    """Filter mode for assignment targeting.

    - NONE: No filter applied
    - INCLUDE: Include only devices that match the filter
    - EXCLUDE: Exclude devices that match the filter
    """

    NONE = "none"
    INCLUDE = "include"
    EXCLUDE = "exclude"

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            normalised = value.strip().lower()
            for member in cls:
                if member.value == normalised:
                    return member
        return None


class AssignmentTargetKind(StrEnum):
    ALL_USERS = "allUsers"
    ALL_DEVICES = "allDevices"
    GROUP_INCLUDE = "groupInclude"
    GROUP_EXCLUDE = "groupExclude"
    UNSUPPORTED = "unsupported"


class AssignmentTarget(GraphBaseModel):
    """Common shape of every assignment target variant."""

    kind: ClassVar[AssignmentTargetKind] = AssignmentTargetKind.UNSUPPORTED

    odata_type: str | None = Field(default=None, alias="@odata.type")
    filter_id: str | None = Field(
        default=None,
        alias="deviceAndAppManagementAssignmentFilterId",
    )
    filter_mode: AssignmentFilterType = Field(
        default=AssignmentFilterType.NONE,
        alias="deviceAndAppManagementAssignmentFilterType",
    )
    group_id: str | None = Field(default=None, alias="groupId")

    @field_validator("filter_mode", mode="before")
    @classmethod
    def _coerce_filter_mode(cls, value: Any) -> Any:
        if value is None:
            return AssignmentFilterType.NONE
        if isinstance(value, str):
            try:
                return AssignmentFilterType(value)
            except ValueError:
                return AssignmentFilterType.NONE
        return value


class AllUsersAssignmentTarget(AssignmentTarget):
    kind: ClassVar[AssignmentTargetKind] = AssignmentTargetKind.ALL_USERS

    odata_type: Literal["#microsoft.graph.allLicensedUsersAssignmentTarget"] = Field(
        default=ALL_USERS_ODATA_TYPE,
        alias="@odata.type",
    )


class AllDevicesAssignmentTarget(AssignmentTarget):
    kind: ClassVar[AssignmentTargetKind] = AssignmentTargetKind.ALL_DEVICES

    odata_type: Literal["#microsoft.graph.allDevicesAssignmentTarget"] = Field(
        default=ALL_DEVICES_ODATA_TYPE,
        alias="@odata.type",
    )


class GroupAssignmentTarget(AssignmentTarget):
    kind: ClassVar[AssignmentTargetKind] = AssignmentTargetKind.GROUP_INCLUDE

    odata_type: Literal["#microsoft.graph.groupAssignmentTarget"] = Field(
        default=GROUP_INCLUDE_ODATA_TYPE,
        alias="@odata.type",
    )
    group_id: str = Field(alias="groupId")


class ExclusionGroupAssignmentTarget(AssignmentTarget):
    kind: ClassVar[AssignmentTargetKind] = AssignmentTargetKind.GROUP_EXCLUDE

    odata_type: Literal["#microsoft.graph.exclusionGroupAssignmentTarget"] = Field(
        default=GROUP_EXCLUDE_ODATA_TYPE,
        alias="@odata.type",
    )
    group_id: str = Field(alias="groupId")


class UnsupportedAssignmentTarget(AssignmentTarget):
    """Placeholder for discriminators outside the four known target types."""

    kind: ClassVar[AssignmentTargetKind] = AssignmentTargetKind.UNSUPPORTED

    reason: str | None = None

    @property
    def label(self) -> str:
        detail = self.odata_type or "missing @odata.type"
        if self.reason:
            return f"unsupported assignment target ({detail}: {self.reason})"
        return f"unsupported assignment target ({detail})"


_TARGET_MODELS: dict[str, type[AssignmentTarget]] = {
    ALL_USERS_ODATA_TYPE: AllUsersAssignmentTarget,
    ALL_DEVICES_ODATA_TYPE: AllDevicesAssignmentTarget,
    GROUP_INCLUDE_ODATA_TYPE: GroupAssignmentTarget,
    GROUP_EXCLUDE_ODATA_TYPE: ExclusionGroupAssignmentTarget,
}


def _unsupported(payload: dict[str, Any], reason: str | None) -> UnsupportedAssignmentTarget:
    odata_type = payload.get("@odata.type")
    try:
        return UnsupportedAssignmentTarget.model_validate({**payload, "reason": reason})
    except ValidationError:
        return UnsupportedAssignmentTarget(
            odata_type=odata_type if isinstance(odata_type, str) else None,
            reason=reason or "malformed target",
        )


def parse_assignment_target(value: Any) -> AssignmentTarget:
    """Map a raw assignment (or bare target) payload onto a target variant.

    Assignment wrappers of the form ``{"id": ..., "target": {...}}`` are
    unwrapped first. Anything that cannot be mapped becomes an
    :class:`UnsupportedAssignmentTarget` rather than raising.
    """

    if isinstance(value, AssignmentTarget):
        return value
    if not isinstance(value, dict):
        return UnsupportedAssignmentTarget(
            reason=f"unexpected payload {type(value).__name__}"
        )

    payload = value.get("target") if isinstance(value.get("target"), dict) else value
    odata_type = payload.get("@odata.type") or payload.get("odata_type")
    if not isinstance(odata_type, str):
        return _unsupported({**payload, "@odata.type": None}, "missing discriminator")

    target_model = _TARGET_MODELS.get(odata_type)
    if target_model is None:
        return _unsupported(payload, None)

    try:
        return target_model.model_validate(payload)
    except ValidationError as exc:
        # Older cached payloads may be missing required fields (e.g. groupId).
        fields = ", ".join(
            ".".join(str(part) for part in error.get("loc", ())) for error in exc.errors()
        )
        return _unsupported(payload, f"invalid fields: {fields}")


__all__ = [
    "AssignmentFilterType",
    "AssignmentTargetKind",
    "AssignmentTarget",
    "AllUsersAssignmentTarget",
    "AllDevicesAssignmentTarget",
    "GroupAssignmentTarget",
    "ExclusionGroupAssignmentTarget",
    "UnsupportedAssignmentTarget",
    "parse_assignment_target",
]
