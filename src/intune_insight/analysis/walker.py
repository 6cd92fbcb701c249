"""Flatten Settings Catalog instance trees into comparable leaves."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from intune_insight.data.models import (
    ChoiceSettingCollectionInstance,
    ChoiceSettingInstance,
    ChoiceSettingValue,
    GroupSettingCollectionInstance,
    GroupSettingInstance,
    GroupSettingValue,
    PolicySettings,
    SettingDefinition,
    SettingInstance,
    SimpleSettingCollectionInstance,
    SimpleSettingInstance,
    SimpleSettingValue,
    UnknownSettingInstance,
    odata_suffix,
)
from intune_insight.utils import get_logger


logger = get_logger(__name__)

PATH_SEPARATOR = " > "
SECRET_MASK = "****"


@dataclass(frozen=True, slots=True)
class SettingLeaf:
    setting_definition_id: str
    qualified_name: str
    setting_name: str
    value: str
    owner_policy_id: str
    owner_policy_name: str
    comparable: bool = True
    placeholder: bool = False


def display_value(value: SimpleSettingValue | None) -> str:
    """Render a simple setting value the way it is shown to administrators."""

    if value is None:
        return ""
    if value.is_secret:
        return SECRET_MASK
    return _scalar_text(value.value)


def _scalar_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, (list, tuple)):
        return ", ".join(_scalar_text(item) for item in raw)
    return str(raw)


class SettingTreeWalker:
    """Walk setting instances using one policy's setting definitions.

    Choice children keep their parent's path, group children extend it with
    the group's label, and collection items extend it with ``label[index]``.
    Everything found under a collection is returned for display only
    (``comparable=False``), as are placeholders for instance types the model
    layer could not map.
    """

    def __init__(self, definitions: Iterable[SettingDefinition] = ()) -> None:
        self._definitions = {definition.id: definition for definition in definitions}

    def walk(
        self,
        instance: SettingInstance,
        path_prefix: Sequence[str] = (),
        *,
        owner_policy_id: str,
        owner_policy_name: str,
    ) -> list[SettingLeaf]:
        context = _WalkContext(
            owner_policy_id=owner_policy_id,
            owner_policy_name=owner_policy_name or owner_policy_id,
        )
        return self._visit(instance, tuple(path_prefix), True, context)

    def label_for(self, definition_id: str) -> str:
        definition = self._definitions.get(definition_id)
        if definition is None:
            return definition_id
        return definition.label

    # ----------------------------------------------------------------- Helpers

    def _visit(
        self,
        instance: SettingInstance,
        prefix: tuple[str, ...],
        comparable: bool,
        context: "_WalkContext",
    ) -> list[SettingLeaf]:
        name = self.label_for(instance.setting_definition_id)
        match instance:
            case ChoiceSettingInstance():
                return self._choice(
                    instance.setting_definition_id,
                    name,
                    instance.choice_setting_value,
                    prefix,
                    prefix,
                    comparable,
                    context,
                )
            case SimpleSettingInstance():
                return [
                    context.leaf(
                        instance.setting_definition_id,
                        prefix,
                        name,
                        display_value(instance.simple_setting_value),
                        comparable=comparable,
                    )
                ]
            case GroupSettingInstance():
                return self._group(
                    instance.group_setting_value, prefix + (name,), comparable, context
                )
            case GroupSettingCollectionInstance():
                leaves: list[SettingLeaf] = []
                for index, item in enumerate(instance.group_setting_collection_value):
                    leaves.extend(
                        self._group(item, prefix + (f"{name}[{index}]",), False, context)
                    )
                return leaves
            case ChoiceSettingCollectionInstance():
                leaves = []
                for index, item in enumerate(instance.choice_setting_collection_value):
                    item_path = prefix + (f"{name}[{index}]",)
                    leaves.extend(
                        self._choice(
                            instance.setting_definition_id,
                            name,
                            item,
                            prefix,
                            item_path,
                            False,
                            context,
                            leaf_name=f"{name}[{index}]",
                        )
                    )
                return leaves
            case SimpleSettingCollectionInstance():
                return [
                    context.leaf(
                        instance.setting_definition_id,
                        prefix,
                        f"{name}[{index}]",
                        display_value(item),
                        comparable=False,
                    )
                    for index, item in enumerate(instance.simple_setting_collection_value)
                ]
            case _:
                return [self._placeholder(instance, prefix, name, context)]

    def _choice(
        self,
        definition_id: str,
        name: str,
        value: ChoiceSettingValue,
        prefix: tuple[str, ...],
        children_prefix: tuple[str, ...],
        comparable: bool,
        context: "_WalkContext",
        *,
        leaf_name: str | None = None,
    ) -> list[SettingLeaf]:
        definition = self._definitions.get(definition_id)
        label = definition.option_label(value.value) if definition is not None else None
        leaves = [
            context.leaf(
                definition_id,
                prefix,
                leaf_name or name,
                label or value.value or "",
                comparable=comparable,
            )
        ]
        for child in value.children:
            leaves.extend(self._visit(child, children_prefix, comparable, context))
        return leaves

    def _group(
        self,
        value: GroupSettingValue,
        prefix: tuple[str, ...],
        comparable: bool,
        context: "_WalkContext",
    ) -> list[SettingLeaf]:
        leaves: list[SettingLeaf] = []
        for child in value.children:
            leaves.extend(self._visit(child, prefix, comparable, context))
        return leaves

    def _placeholder(
        self,
        instance: SettingInstance,
        prefix: tuple[str, ...],
        name: str,
        context: "_WalkContext",
    ) -> SettingLeaf:
        type_name = odata_suffix(instance.odata_type) or "missing @odata.type"
        reason = instance.reason if isinstance(instance, UnknownSettingInstance) else None
        logger.warning(
            "Unsupported setting instance",
            policy_id=context.owner_policy_id,
            setting_definition_id=instance.setting_definition_id,
            odata_type=instance.odata_type,
            reason=reason,
        )
        return context.leaf(
            instance.setting_definition_id,
            prefix,
            name or "unknown setting",
            f"<unsupported setting type: {type_name}>",
            comparable=False,
            placeholder=True,
        )


@dataclass(frozen=True, slots=True)
class _WalkContext:
    owner_policy_id: str
    owner_policy_name: str

    def leaf(
        self,
        definition_id: str,
        prefix: tuple[str, ...],
        name: str,
        value: str,
        *,
        comparable: bool,
        placeholder: bool = False,
    ) -> SettingLeaf:
        return SettingLeaf(
            setting_definition_id=definition_id,
            qualified_name=PATH_SEPARATOR.join(prefix + (name,)),
            setting_name=name,
            value=value,
            owner_policy_id=self.owner_policy_id,
            owner_policy_name=self.owner_policy_name,
            comparable=comparable,
            placeholder=placeholder,
        )


def walk(
    instance: SettingInstance,
    definitions: Iterable[SettingDefinition] = (),
    path_prefix: Sequence[str] = (),
    *,
    owner_policy_id: str,
    owner_policy_name: str,
) -> list[SettingLeaf]:
    return SettingTreeWalker(definitions).walk(
        instance,
        path_prefix,
        owner_policy_id=owner_policy_id,
        owner_policy_name=owner_policy_name,
    )


def walk_policy(policy: PolicySettings) -> list[SettingLeaf]:
    """Every leaf of every top-level setting in ``policy``."""

    leaves: list[SettingLeaf] = []
    for setting in policy.settings:
        leaves.extend(
            walk(
                setting.setting_instance,
                setting.setting_definitions,
                owner_policy_id=policy.id,
                owner_policy_name=policy.display_name or policy.id,
            )
        )
    return leaves


__all__ = [
    "PATH_SEPARATOR",
    "SECRET_MASK",
    "SettingLeaf",
    "SettingTreeWalker",
    "display_value",
    "walk",
    "walk_policy",
]
