from __future__ import annotations

from intune_insight.data import (
    AllDevicesAssignmentTarget,
    AssignmentFilterType,
    AssignmentTargetKind,
    ExclusionGroupAssignmentTarget,
    GroupAssignmentTarget,
    GroupMembership,
    MembershipKind,
    UnsupportedAssignmentTarget,
    parse_assignment_target,
)

from tests.factories import all_devices_target, group_target, make_assignable


def test_parse_assignment_target_unwraps_assignment_records() -> None:
    target = parse_assignment_target(group_target("g-1", filter_id="f-1", filter_mode="Include"))

    assert isinstance(target, GroupAssignmentTarget)
    assert target.kind is AssignmentTargetKind.GROUP_INCLUDE
    assert target.group_id == "g-1"
    assert target.filter_id == "f-1"
    assert target.filter_mode is AssignmentFilterType.INCLUDE


def test_parse_assignment_target_maps_exclusions_and_built_ins() -> None:
    exclusion = parse_assignment_target(
        {"@odata.type": "#microsoft.graph.exclusionGroupAssignmentTarget", "groupId": "g-2"}
    )
    all_devices = parse_assignment_target(all_devices_target())

    assert isinstance(exclusion, ExclusionGroupAssignmentTarget)
    assert exclusion.kind is AssignmentTargetKind.GROUP_EXCLUDE
    assert isinstance(all_devices, AllDevicesAssignmentTarget)
    assert all_devices.filter_mode is AssignmentFilterType.NONE


def test_unknown_discriminator_becomes_labelled_placeholder() -> None:
    target = parse_assignment_target(
        {"target": {"@odata.type": "#microsoft.graph.someFutureTarget", "groupId": "g-9"}}
    )

    assert isinstance(target, UnsupportedAssignmentTarget)
    assert target.kind is AssignmentTargetKind.UNSUPPORTED
    assert "someFutureTarget" in target.label


def test_group_target_without_group_id_is_unsupported() -> None:
    target = parse_assignment_target({"@odata.type": "#microsoft.graph.groupAssignmentTarget"})

    assert isinstance(target, UnsupportedAssignmentTarget)
    assert target.reason is not None
    assert "groupId" in target.reason


def test_non_mapping_payloads_never_raise() -> None:
    assert isinstance(parse_assignment_target("oops"), UnsupportedAssignmentTarget)
    assert isinstance(parse_assignment_target({}), UnsupportedAssignmentTarget)


def test_unrecognised_filter_mode_falls_back_to_none() -> None:
    target = parse_assignment_target(group_target("g-1", filter_id="f-1", filter_mode="sideways"))

    assert target.filter_mode is AssignmentFilterType.NONE


def test_assignable_derives_asset_type_from_odata_type() -> None:
    asset = make_assignable(
        "app-1",
        group_target("g-1"),
        odata_type="#microsoft.graph.winGetApp",
        installState="installed",
    )

    assert asset.asset_type_tag == "winGetApp"
    assert asset.state == "installed"
    assert [target.kind for target in asset.assignments] == [AssignmentTargetKind.GROUP_INCLUDE]


def test_group_membership_classifies_directory_objects() -> None:
    dynamic = GroupMembership.from_directory_object(
        {"id": "g-1", "displayName": "Dyn", "groupTypes": ["DynamicMembership"]}
    )
    role = GroupMembership.from_directory_object(
        {"id": "r-1", "@odata.type": "#microsoft.graph.directoryRole", "displayName": "Reader"}
    )
    assigned = GroupMembership.from_directory_object({"id": "g-2", "displayName": None})

    assert dynamic.is_dynamic
    assert role.kind is MembershipKind.DIRECTORY_ROLE
    assert assigned.kind is MembershipKind.ASSIGNED
    assert assigned.display_name == ""
