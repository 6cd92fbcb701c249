from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from intune_insight.data import AssetClass, DeviceSnapshot, load_snapshot
from intune_insight.utils import ErrorCategory, SnapshotError

from tests.factories import LATEST_UPN, PRIMARY_UPN, snapshot_payload


def test_from_payload_builds_all_sections() -> None:
    snapshot = DeviceSnapshot.from_payload(snapshot_payload())

    assert snapshot.device.principal_name == "DESKTOP-01"
    assert snapshot.primary_user is not None
    assert snapshot.primary_user.principal_name == PRIMARY_UPN
    assert snapshot.latest_user is not None
    assert snapshot.latest_user.principal_name == LATEST_UPN
    assert [item.id for item in snapshot.assets_for(AssetClass.APPLICATION)] == [
        "app-1",
        "app-2",
        "app-3",
    ]
    assert snapshot.active_for(AssetClass.APPLICATION) == frozenset({"app-1", "app-3"})
    assert set(snapshot.policy_settings) == {"policy-a", "policy-b"}
    assert snapshot.issues == []


def test_invalid_records_are_skipped_and_reported() -> None:
    payload = snapshot_payload(
        filters=[{"id": "f-bad"}, {"id": "f-ok", "displayName": "Ok"}],
    )

    snapshot = DeviceSnapshot.from_payload(payload)

    assert [item.id for item in snapshot.filters] == ["f-ok"]
    assert len(snapshot.issues) == 1
    assert snapshot.issues[0].resource == "filters"
    assert snapshot.issues[0].identifier == "f-bad"


def test_duplicate_assets_and_memberships_are_dropped() -> None:
    payload = snapshot_payload()
    payload["scripts"] = [
        {"id": "script-1", "displayName": "First"},
        {"id": "script-1", "displayName": "Second"},
    ]
    payload["device"]["memberships"].append({"id": "g-devices", "displayName": "Again"})

    snapshot = DeviceSnapshot.from_payload(payload)

    scripts = snapshot.assets_for(AssetClass.SCRIPT)
    assert [item.display_name for item in scripts] == ["First"]
    assert [m.group_id for m in snapshot.device.memberships] == ["g-devices", "g-shared"]


def test_active_assets_accept_flag_mappings() -> None:
    payload = snapshot_payload(
        activeAssets={"scripts": {"script-1": True, "script-2": False}},
    )

    snapshot = DeviceSnapshot.from_payload(payload)

    assert snapshot.active_for(AssetClass.SCRIPT) == frozenset({"script-1"})
    assert snapshot.active_for(AssetClass.APPLICATION) == frozenset()


def test_optional_user_sections_may_be_missing() -> None:
    payload = snapshot_payload()
    del payload["primaryUser"]
    del payload["latestLoggedOnUser"]

    snapshot = DeviceSnapshot.from_payload(payload)

    assert snapshot.primary_user is None
    assert snapshot.latest_user is None


def test_missing_device_section_raises() -> None:
    payload = snapshot_payload()
    del payload["device"]

    with pytest.raises(SnapshotError) as excinfo:
        DeviceSnapshot.from_payload(payload)

    assert excinfo.value.category is ErrorCategory.VALIDATION


def test_load_snapshot_reads_documents(write_snapshot: Callable[..., Path]) -> None:
    snapshot = load_snapshot(write_snapshot())

    assert snapshot.device.principal_id == "device-1"


def test_load_snapshot_reports_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SnapshotError) as excinfo:
        load_snapshot(path)

    assert excinfo.value.category is ErrorCategory.FORMAT
    assert excinfo.value.source == str(path)


def test_load_snapshot_reports_undecodable_bytes(tmp_path: Path) -> None:
    path = tmp_path / "latin.json"
    path.write_bytes(b'{"device": {"id": "\xff\xfe"}}')

    with pytest.raises(SnapshotError) as excinfo:
        load_snapshot(path)

    assert excinfo.value.category is ErrorCategory.FORMAT
    assert excinfo.value.source == str(path)


def test_load_snapshot_reports_missing_files(tmp_path: Path) -> None:
    with pytest.raises(SnapshotError) as excinfo:
        load_snapshot(tmp_path / "missing.json")

    assert excinfo.value.category is ErrorCategory.IO


def test_root_must_be_an_object(write_snapshot: Callable[..., Path]) -> None:
    with pytest.raises(SnapshotError):
        load_snapshot(write_snapshot([1, 2, 3]))
