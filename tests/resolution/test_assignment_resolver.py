from __future__ import annotations

from collections import Counter

from intune_insight.data import (
    AssetClass,
    AssignmentContext,
    AssignmentFilterType,
    IncludeExclude,
)
from intune_insight.resolution import (
    ALL_DEVICES_GROUP_NAME,
    ALL_USERS_GROUP_NAME,
    UNKNOWN_ASSIGNMENT_GROUP_NAME,
    AssetClassProfile,
    deduplicate_assignments,
)

from tests.factories import (
    LATEST_UPN,
    PRIMARY_UPN,
    all_devices_target,
    all_users_target,
    exclusion_target,
    group_target,
    make_actors,
    make_assignable,
    make_filter,
    make_resolver,
)


def test_all_devices_target_on_active_asset_yields_single_device_row() -> None:
    resolver = make_resolver(make_actors())
    asset = make_assignable("app-1", all_devices_target())

    rows = resolver.resolve(asset, platform_active=True)

    assert len(rows) == 1
    (row,) = rows
    assert row.context is AssignmentContext.DEVICE
    assert row.assignment_group_name == ALL_DEVICES_GROUP_NAME
    assert row.include_exclude is IncludeExclude.NONE
    assert row.include_exclude.value == ""
    assert row.user_principal_name is None


def test_all_users_target_carries_primary_user_name() -> None:
    resolver = make_resolver(make_actors())

    (row,) = resolver.resolve(make_assignable("app-1", all_users_target()))

    assert row.context is AssignmentContext.USER
    assert row.assignment_group_name == ALL_USERS_GROUP_NAME
    assert row.user_principal_name == PRIMARY_UPN


def test_all_users_falls_back_to_latest_user_name() -> None:
    resolver = make_resolver(make_actors(primary_upn=None))

    (row,) = resolver.resolve(make_assignable("app-1", all_users_target()))

    assert row.user_principal_name == LATEST_UPN


def test_device_group_match() -> None:
    resolver = make_resolver(make_actors(device=["g-1"], names={"g-1": "Kiosks"}))

    (row,) = resolver.resolve(make_assignable("app-1", group_target("g-1")))

    assert row.context is AssignmentContext.DEVICE
    assert row.include_exclude is IncludeExclude.INCLUDED
    assert row.assignment_group_name == "Kiosks"
    assert row.assignment_group_id == "g-1"
    assert row.user_principal_name is None


def test_group_shared_by_device_and_primary_user_is_mixed() -> None:
    resolver = make_resolver(make_actors(device=["g-1"], primary=["g-1"]))

    rows = resolver.resolve(make_assignable("app-1", group_target("g-1")))

    assert [row.context for row in rows] == [AssignmentContext.MIXED_DEVICE_USER]
    assert rows[0].user_principal_name == PRIMARY_UPN


def test_group_shared_by_device_and_latest_user_is_mixed() -> None:
    resolver = make_resolver(make_actors(device=["g-1"], latest=["g-1"]))

    (row,) = resolver.resolve(make_assignable("app-1", group_target("g-1")))

    assert row.context is AssignmentContext.MIXED_DEVICE_USER
    assert row.user_principal_name == LATEST_UPN


def test_latest_user_only_membership_resolves_as_user() -> None:
    resolver = make_resolver(make_actors(latest=["g1"], names={"g1": "Shift Workers"}))

    rows = resolver.resolve(make_assignable("app-1", group_target("g1")))

    assert len(rows) == 1
    assert rows[0].context is AssignmentContext.USER
    assert rows[0].assignment_group_name == "Shift Workers"
    assert rows[0].user_principal_name == LATEST_UPN


def test_primary_user_match_wins_over_latest_user() -> None:
    resolver = make_resolver(make_actors(primary=["g-1"], latest=["g-1"]))

    (row,) = resolver.resolve(make_assignable("app-1", group_target("g-1")))

    assert row.context is AssignmentContext.USER
    assert row.user_principal_name == PRIMARY_UPN


def test_latest_user_ignored_when_same_as_primary() -> None:
    actors = make_actors(latest=["g-1"], latest_id="user-primary", latest_upn=PRIMARY_UPN)
    resolver = make_resolver(actors)

    rows = resolver.resolve(make_assignable("app-1", group_target("g-1")))

    assert rows == []
    assert actors.latest_user_principal_name is None


def test_exclusion_group_is_marked_excluded() -> None:
    resolver = make_resolver(make_actors(device=["g-ex"]))

    (row,) = resolver.resolve(make_assignable("app-1", exclusion_target("g-ex")))

    assert row.include_exclude is IncludeExclude.EXCLUDED


def test_unmatched_groups_contribute_nothing() -> None:
    resolver = make_resolver(make_actors(device=["g-1"]))

    assert resolver.resolve(make_assignable("app-1", group_target("g-other"))) == []


def test_filter_details_are_attached() -> None:
    resolver = make_resolver(
        make_actors(device=["g-1"]),
        filters=[make_filter("f-1", "Corporate laptops", "(device.x -eq 1)")],
    )
    asset = make_assignable(
        "app-1",
        group_target("g-1", filter_id="f-1", filter_mode="exclude"),
        all_devices_target(filter_id="f-unknown", filter_mode="include"),
    )

    by_group = {row.assignment_group_name: row for row in resolver.resolve(asset)}

    filtered = by_group["Group g-1"]
    assert filtered.filter_display_name == "Corporate laptops"
    assert filtered.filter_rule == "(device.x -eq 1)"
    assert filtered.filter_mode is AssignmentFilterType.EXCLUDE
    unknown = by_group[ALL_DEVICES_GROUP_NAME]
    assert unknown.filter_id == "f-unknown"
    assert unknown.filter_display_name is None
    assert unknown.filter_mode is AssignmentFilterType.INCLUDE


def test_active_asset_without_match_gets_unknown_row() -> None:
    resolver = make_resolver(make_actors(), asset_class=AssetClass.SCRIPT)

    (row,) = resolver.resolve(
        make_assignable("script-1", group_target("g-nested")),
        platform_active=True,
    )

    assert row.context is AssignmentContext.UNKNOWN
    assert row.assignment_group_name == UNKNOWN_ASSIGNMENT_GROUP_NAME
    assert row.filter_id is None
    assert row.asset_class is AssetClass.SCRIPT
    assert row.state == "Detection state not reported"


def test_unknown_row_count_matches_active_unmatched_assets() -> None:
    resolver = make_resolver(make_actors(device=["g-1"]))
    assets = [
        make_assignable("a-matched-active", group_target("g-1")),
        make_assignable("a-unmatched-active", group_target("g-2")),
        make_assignable("a-unassigned-active"),
        make_assignable("a-unmatched-inactive", group_target("g-3")),
        make_assignable("a-matched-inactive", all_devices_target()),
    ]
    active = {"a-matched-active", "a-unmatched-active", "a-unassigned-active"}

    result = resolver.resolve_all(assets, active_asset_ids=active)

    unknown_ids = sorted(row.asset_id for row in result.assignments if row.is_unknown)
    assert unknown_ids == ["a-unassigned-active", "a-unmatched-active"]
    assert result.unknown_count == 2


def test_resolution_is_idempotent() -> None:
    resolver = make_resolver(make_actors(device=["g-1"], primary=["g-1", "g-2"], latest=["g-3"]))
    assets = [
        make_assignable("a", group_target("g-1"), group_target("g-2"), all_users_target()),
        make_assignable("b", group_target("g-3"), exclusion_target("g-2")),
    ]

    first = resolver.resolve_all(assets, active_asset_ids={"a", "b"})
    second = resolver.resolve_all(assets, active_asset_ids={"a", "b"})

    assert first.assignments == second.assignments


def test_duplicate_targets_collapse_to_one_row() -> None:
    resolver = make_resolver(make_actors(device=["g-1"]))
    asset = make_assignable("app-1", group_target("g-1"), group_target("g-1"))

    rows = resolver.resolve(asset)

    assert len(rows) == 1


def test_rows_are_unique_per_dedup_key() -> None:
    names = {"g-a": "Sales", "g-b": "Sales"}
    resolver = make_resolver(make_actors(primary=["g-a"], latest=["g-b"], names=names))
    asset = make_assignable("app-1", group_target("g-b"), group_target("g-a"))

    rows = resolver.resolve(asset)

    counts = Counter(row.dedup_key() for row in rows)
    assert all(count == 1 for count in counts.values())
    (row,) = rows
    assert row.user_principal_name == PRIMARY_UPN


def test_deduplicate_prefers_latest_user_when_primary_absent() -> None:
    names = {"g-a": "Sales", "g-b": "Sales"}
    resolver = make_resolver(make_actors(device=["g-a"], latest=["g-b"], names=names))
    device_row = resolver.resolve(make_assignable("app-1", group_target("g-a")))[0]
    user_row = device_row.model_copy(
        update={"context": AssignmentContext.DEVICE, "user_principal_name": LATEST_UPN}
    )

    (merged,) = deduplicate_assignments(
        [device_row, user_row],
        primary_user_principal_name=PRIMARY_UPN,
        latest_user_principal_name=LATEST_UPN,
    )

    assert merged.user_principal_name == LATEST_UPN


def test_unsupported_targets_are_reported_not_resolved() -> None:
    resolver = make_resolver(make_actors(device=["g-1"]))
    asset = make_assignable(
        "app-1",
        {"target": {"@odata.type": "#microsoft.graph.someFutureTarget"}},
        group_target("g-1"),
    )

    result = resolver.resolve_all([asset])

    assert [row.assignment_group_id for row in result.assignments] == ["g-1"]
    (unsupported,) = result.unsupported_targets
    assert unsupported.asset_id == "app-1"
    assert "someFutureTarget" in unsupported.label


def test_active_asset_with_only_unsupported_target_gets_unknown_row() -> None:
    resolver = make_resolver(make_actors(device=["g-1"]))
    asset = make_assignable(
        "app-1",
        {"target": {"@odata.type": "#microsoft.graph.someFutureTarget"}},
    )

    result = resolver.resolve_all([asset], active_asset_ids={"app-1"})

    (row,) = result.assignments
    assert row.context is AssignmentContext.UNKNOWN
    assert row.asset_id == "app-1"
    assert result.unknown_count == 1
    assert len(result.unsupported_targets) == 1


def test_profile_controls_state_and_unknown_label() -> None:
    profile = AssetClassProfile(
        asset_class=AssetClass.CONFIGURATION_POLICY,
        state_of=lambda asset: f"state:{asset.id}",
        unknown_group_name="not evaluated",
    )
    resolver = make_resolver(make_actors(), profile=profile)

    (row,) = resolver.resolve(make_assignable("policy-1"), platform_active=True)

    assert row.assignment_group_name == "not evaluated"
    assert row.state == "state:policy-1"
    assert row.asset_class is AssetClass.CONFIGURATION_POLICY


def test_reported_state_is_kept() -> None:
    resolver = make_resolver(make_actors(device=["g-1"]))

    (row,) = resolver.resolve(
        make_assignable("app-1", group_target("g-1"), installState="installed")
    )

    assert row.state == "installed"
    assert row.asset_type_tag == "win32LobApp"


def test_applied_asset_ids_skip_excluded_assets() -> None:
    resolver = make_resolver(
        make_actors(device=["g-1", "g-ex"]),
        asset_class=AssetClass.CONFIGURATION_POLICY,
    )
    assets = [
        make_assignable("p-1", group_target("g-1")),
        make_assignable("p-2", group_target("g-1"), exclusion_target("g-ex")),
        make_assignable("p-3", all_devices_target()),
    ]

    result = resolver.resolve_all(assets)

    assert result.applied_asset_ids() == ["p-1", "p-3"]
