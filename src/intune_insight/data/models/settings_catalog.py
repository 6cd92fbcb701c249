"""Settings Catalog records: nested setting instances plus their definitions.

Setting instances form a tree whose node type is carried by ``@odata.type``.
The discriminator is mapped once, in :func:`parse_setting_instance`, onto a
closed set of instance classes; everything downstream matches on
:class:`SettingInstanceKind`.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, ClassVar

from pydantic import AliasChoices, Field, ValidationError, field_validator

from .common import GraphBaseModel, GraphResource

_ODATA_PREFIX = "#microsoft.graph.deviceManagementConfiguration"


class SettingInstanceKind(StrEnum):
    CHOICE = "choice"
    SIMPLE = "simple"
    GROUP = "group"
    GROUP_COLLECTION = "groupCollection"
    CHOICE_COLLECTION = "choiceCollection"
    SIMPLE_COLLECTION = "simpleCollection"
    UNKNOWN = "unknown"

    @property
    def is_collection(self) -> bool:
        return self in {
            SettingInstanceKind.GROUP_COLLECTION,
            SettingInstanceKind.CHOICE_COLLECTION,
            SettingInstanceKind.SIMPLE_COLLECTION,
        }


def _coerce_children(value: Any) -> Any:
    if value is None:
        return []
    if not isinstance(value, list):
        return value
    return [parse_setting_instance(item) for item in value]


class SimpleSettingValue(GraphBaseModel):
    odata_type: str | None = Field(default=None, alias="@odata.type")
    value: Any = None

    @property
    def is_secret(self) -> bool:
        return bool(self.odata_type and "SecretSettingValue" in self.odata_type)


class ChoiceSettingValue(GraphBaseModel):
    value: str | None = None
    children: list[SettingInstance] = Field(default_factory=list)

    @field_validator("children", mode="before")
    @classmethod
    def _parse_children(cls, value: Any) -> Any:
        return _coerce_children(value)


class GroupSettingValue(GraphBaseModel):
    children: list[SettingInstance] = Field(default_factory=list)

    @field_validator("children", mode="before")
    @classmethod
    def _parse_children(cls, value: Any) -> Any:
        return _coerce_children(value)


class SettingInstance(GraphBaseModel):
    kind: ClassVar[SettingInstanceKind] = SettingInstanceKind.UNKNOWN

    odata_type: str | None = Field(default=None, alias="@odata.type")
    setting_definition_id: str = Field(default="", alias="settingDefinitionId")


class ChoiceSettingInstance(SettingInstance):
    kind: ClassVar[SettingInstanceKind] = SettingInstanceKind.CHOICE

    choice_setting_value: ChoiceSettingValue = Field(
        default_factory=ChoiceSettingValue, alias="choiceSettingValue"
    )


class SimpleSettingInstance(SettingInstance):
    kind: ClassVar[SettingInstanceKind] = SettingInstanceKind.SIMPLE

    simple_setting_value: SimpleSettingValue = Field(
        default_factory=SimpleSettingValue, alias="simpleSettingValue"
    )


class GroupSettingInstance(SettingInstance):
    kind: ClassVar[SettingInstanceKind] = SettingInstanceKind.GROUP

    group_setting_value: GroupSettingValue = Field(
        default_factory=GroupSettingValue, alias="groupSettingValue"
    )


class GroupSettingCollectionInstance(SettingInstance):
    kind: ClassVar[SettingInstanceKind] = SettingInstanceKind.GROUP_COLLECTION

    group_setting_collection_value: list[GroupSettingValue] = Field(
        default_factory=list, alias="groupSettingCollectionValue"
    )


class ChoiceSettingCollectionInstance(SettingInstance):
    kind: ClassVar[SettingInstanceKind] = SettingInstanceKind.CHOICE_COLLECTION

    choice_setting_collection_value: list[ChoiceSettingValue] = Field(
        default_factory=list, alias="choiceSettingCollectionValue"
    )


class SimpleSettingCollectionInstance(SettingInstance):
    kind: ClassVar[SettingInstanceKind] = SettingInstanceKind.SIMPLE_COLLECTION

    simple_setting_collection_value: list[SimpleSettingValue] = Field(
        default_factory=list, alias="simpleSettingCollectionValue"
    )


class UnknownSettingInstance(SettingInstance):
    """Placeholder for instance types this module does not understand."""

    kind: ClassVar[SettingInstanceKind] = SettingInstanceKind.UNKNOWN

    reason: str | None = None


ChoiceSettingValue.model_rebuild()
GroupSettingValue.model_rebuild()


_INSTANCE_MODELS: dict[str, type[SettingInstance]] = {
    f"{_ODATA_PREFIX}ChoiceSettingInstance": ChoiceSettingInstance,
    f"{_ODATA_PREFIX}SimpleSettingInstance": SimpleSettingInstance,
    f"{_ODATA_PREFIX}GroupSettingInstance": GroupSettingInstance,
    f"{_ODATA_PREFIX}GroupSettingCollectionInstance": GroupSettingCollectionInstance,
    f"{_ODATA_PREFIX}ChoiceSettingCollectionInstance": ChoiceSettingCollectionInstance,
    f"{_ODATA_PREFIX}SimpleSettingCollectionInstance": SimpleSettingCollectionInstance,
}


def parse_setting_instance(value: Any) -> SettingInstance:
    """Map a raw ``settingInstance`` payload onto its typed variant."""

    if isinstance(value, SettingInstance):
        return value
    if not isinstance(value, dict):
        return UnknownSettingInstance(reason=f"unexpected payload {type(value).__name__}")

    odata_type = value.get("@odata.type")
    definition_id = value.get("settingDefinitionId")
    model = _INSTANCE_MODELS.get(odata_type) if isinstance(odata_type, str) else None
    if model is None:
        return UnknownSettingInstance(
            odata_type=odata_type if isinstance(odata_type, str) else None,
            setting_definition_id=definition_id if isinstance(definition_id, str) else "",
            reason="unrecognised setting instance type",
        )
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        return UnknownSettingInstance(
            odata_type=odata_type,
            setting_definition_id=definition_id if isinstance(definition_id, str) else "",
            reason=f"invalid payload ({exc.error_count()} error(s))",
        )


class SettingOption(GraphBaseModel):
    item_id: str = Field(alias="itemId")
    display_name: str | None = Field(default=None, alias="displayName")
    name: str | None = None


class SettingDefinition(GraphResource):
    display_name: str | None = Field(
        default=None,
        alias="displayName",
        validation_alias=AliasChoices("displayName", "name"),
    )
    name: str | None = None
    description: str | None = None
    options: list[SettingOption] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def label(self) -> str:
        return self.display_name or self.name or self.id

    def option_label(self, item_id: str | None) -> str | None:
        if item_id is None:
            return None
        for option in self.options:
            if option.item_id == item_id:
                return option.display_name or option.name or option.item_id
        return None


class PolicySetting(GraphBaseModel):
    """One top-level setting of a policy with its sibling definitions."""

    id: str | None = None
    setting_instance: SettingInstance = Field(alias="settingInstance")
    setting_definitions: list[SettingDefinition] = Field(
        default_factory=list, alias="settingDefinitions"
    )

    @field_validator("setting_instance", mode="before")
    @classmethod
    def _parse_instance(cls, value: Any) -> Any:
        return parse_setting_instance(value)

    @field_validator("setting_definitions", mode="before")
    @classmethod
    def _coerce_definitions(cls, value: Any) -> Any:
        return [] if value is None else value


class PolicySettings(GraphResource):
    """Settings snapshot of one configuration policy."""

    display_name: str | None = Field(
        default=None,
        alias="displayName",
        validation_alias=AliasChoices("displayName", "name"),
    )
    settings: list[PolicySetting] = Field(default_factory=list)


__all__ = [
    "SettingInstanceKind",
    "SettingInstance",
    "ChoiceSettingInstance",
    "SimpleSettingInstance",
    "GroupSettingInstance",
    "GroupSettingCollectionInstance",
    "ChoiceSettingCollectionInstance",
    "SimpleSettingCollectionInstance",
    "UnknownSettingInstance",
    "ChoiceSettingValue",
    "GroupSettingValue",
    "SimpleSettingValue",
    "SettingOption",
    "SettingDefinition",
    "PolicySetting",
    "PolicySettings",
    "parse_setting_instance",
]
