from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from .assignable import AssetClass
from .assignment import AssignmentFilterType
from .common import GraphBaseModel


class AssignmentContext(StrEnum):
    DEVICE = "Device"
    USER = "User"
    MIXED_DEVICE_USER = "Device/User"
    UNKNOWN = "Unknown"


class IncludeExclude(StrEnum):
    INCLUDED = "Included"
    EXCLUDED = "Excluded"
    NONE = ""


class ResolvedAssignment(GraphBaseModel):
    """Explains why one asset applies (or is excluded) on the device."""

    asset_id: str = Field(alias="assetId")
    asset_name: str = Field(default="", alias="assetName")
    asset_type_tag: str | None = Field(default=None, alias="assetType")
    asset_class: AssetClass = Field(alias="assetClass")
    context: AssignmentContext
    include_exclude: IncludeExclude = Field(
        default=IncludeExclude.NONE, alias="includeExclude"
    )
    assignment_group_name: str = Field(alias="assignmentGroupName")
    assignment_group_id: str | None = Field(default=None, alias="assignmentGroupId")
    filter_id: str | None = Field(default=None, alias="filterId")
    filter_display_name: str | None = Field(default=None, alias="filterDisplayName")
    filter_mode: AssignmentFilterType | None = Field(default=None, alias="filterMode")
    filter_rule: str | None = Field(default=None, alias="filterRule")
    user_principal_name: str | None = Field(default=None, alias="userPrincipalName")
    state: str | None = None

    def dedup_key(
        self,
    ) -> tuple[str, str, str, str, str | None, str | None]:
        mode = self.filter_mode.value if self.filter_mode is not None else None
        return (
            self.asset_id,
            self.context.value,
            self.include_exclude.value,
            self.assignment_group_name,
            self.filter_display_name or self.filter_id,
            mode,
        )

    @property
    def is_unknown(self) -> bool:
        return self.context is AssignmentContext.UNKNOWN


__all__ = ["AssignmentContext", "IncludeExclude", "ResolvedAssignment"]
