from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from .assignment import AssignmentTarget, parse_assignment_target
from .common import GraphResource, odata_suffix


class AssetClass(StrEnum):
    APPLICATION = "application"
    CONFIGURATION_POLICY = "configurationPolicy"
    SCRIPT = "script"


class Assignable(GraphResource):
    """Envelope for one application, configuration policy or script.

    ``state`` carries the asset-class-specific status reported for the device
    (install state for apps, compliance/policy state for policies, detection
    state for scripts). ``asset_type_tag`` is derived from ``@odata.type``
    when the payload does not provide one.
    """

    display_name: str = Field(
        default="",
        alias="displayName",
        validation_alias=AliasChoices("displayName", "name"),
    )
    asset_type_tag: str | None = Field(
        default=None,
        alias="assetType",
        validation_alias=AliasChoices("assetType", "assetTypeTag"),
    )
    assignments: list[AssignmentTarget] = Field(default_factory=list)
    state: str | None = Field(
        default=None,
        alias="state",
        validation_alias=AliasChoices(
            "state", "installState", "complianceState", "detectionState"
        ),
    )

    @model_validator(mode="before")
    @classmethod
    def _derive_asset_type(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("assetType") or data.get("assetTypeTag") or data.get("asset_type_tag"):
            return data
        suffix = odata_suffix(data.get("@odata.type"))
        if suffix:
            data = {**data, "assetType": suffix}
        return data

    @field_validator("display_name", mode="before")
    @classmethod
    def _coerce_display_name(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("assignments", mode="before")
    @classmethod
    def _coerce_assignments(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        return [parse_assignment_target(item) for item in value]


__all__ = ["AssetClass", "Assignable"]
