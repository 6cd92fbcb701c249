from __future__ import annotations

from intune_insight.data import (
    PolicySetting,
    SettingDefinition,
    SettingInstanceKind,
    parse_setting_instance,
)
from intune_insight.data.models import (
    ChoiceSettingInstance,
    GroupSettingCollectionInstance,
    SimpleSettingInstance,
    UnknownSettingInstance,
)

from tests.factories import (
    choice_instance,
    group_collection_instance,
    make_definition,
    simple_instance,
)


def test_choice_instance_children_are_typed() -> None:
    instance = parse_setting_instance(
        choice_instance("def-choice", "def-choice_1", simple_instance("def-child", "5"))
    )

    assert isinstance(instance, ChoiceSettingInstance)
    assert instance.kind is SettingInstanceKind.CHOICE
    (child,) = instance.choice_setting_value.children
    assert isinstance(child, SimpleSettingInstance)
    assert child.simple_setting_value.value == "5"


def test_collection_kinds_report_collection() -> None:
    instance = parse_setting_instance(
        group_collection_instance("def-rules", [simple_instance("def-name", "rule-1")])
    )

    assert isinstance(instance, GroupSettingCollectionInstance)
    assert instance.kind.is_collection
    assert not SettingInstanceKind.GROUP.is_collection


def test_unknown_instance_type_keeps_definition_id() -> None:
    instance = parse_setting_instance(
        {
            "@odata.type": "#microsoft.graph.deviceManagementConfigurationFancyInstance",
            "settingDefinitionId": "def-x",
        }
    )

    assert isinstance(instance, UnknownSettingInstance)
    assert instance.kind is SettingInstanceKind.UNKNOWN
    assert instance.setting_definition_id == "def-x"


def test_secret_values_are_detected() -> None:
    instance = parse_setting_instance(
        simple_instance("def-secret", "hunter2", value_type="SecretSettingValue")
    )

    assert isinstance(instance, SimpleSettingInstance)
    assert instance.simple_setting_value.is_secret


def test_definition_option_labels() -> None:
    definition = SettingDefinition.from_graph(
        make_definition("def-choice", "Enable Feature", {"def-choice_1": "Enabled"})
    )

    assert definition.label == "Enable Feature"
    assert definition.option_label("def-choice_1") == "Enabled"
    assert definition.option_label("def-choice_0") is None
    assert definition.option_label(None) is None


def test_policy_setting_parses_nested_instance() -> None:
    setting = PolicySetting.from_graph(
        {
            "id": "s-1",
            "settingInstance": simple_instance("def-a", 1),
            "settingDefinitions": None,
        }
    )

    assert isinstance(setting.setting_instance, SimpleSettingInstance)
    assert setting.setting_definitions == []
