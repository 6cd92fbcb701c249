"""Boundary between the retrieval collaborator and the resolution core.

A device snapshot is the JSON document (or equivalent mapping) assembled by
whatever fetched the data: the three actors' memberships, filters, the three
asset collections, which assets the platform reports active on the device, and
optionally the Settings Catalog trees of configuration policies. Records that
fail validation are skipped and reported; only an unreadable or wrongly shaped
document raises.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from intune_insight.data.models import (
    ActorKind,
    ActorMemberships,
    AssetClass,
    Assignable,
    AssignmentFilter,
    GroupMembership,
    PolicySetting,
    PolicySettings,
)
from intune_insight.data.validation import SnapshotValidator, ValidationIssue
from intune_insight.utils import ErrorCategory, SnapshotError, get_logger


logger = get_logger(__name__)

ASSET_COLLECTION_KEYS: dict[AssetClass, str] = {
    AssetClass.APPLICATION: "applications",
    AssetClass.CONFIGURATION_POLICY: "configurationPolicies",
    AssetClass.SCRIPT: "scripts",
}

ACTOR_KEYS: dict[ActorKind, str] = {
    ActorKind.DEVICE: "device",
    ActorKind.PRIMARY_USER: "primaryUser",
    ActorKind.LATEST_LOGGED_ON_USER: "latestLoggedOnUser",
}


@dataclass(slots=True)
class DeviceSnapshot:
    device: ActorMemberships
    primary_user: ActorMemberships | None = None
    latest_user: ActorMemberships | None = None
    filters: list[AssignmentFilter] = field(default_factory=list)
    assets: dict[AssetClass, list[Assignable]] = field(default_factory=dict)
    active_assets: dict[AssetClass, frozenset[str]] = field(default_factory=dict)
    policy_settings: dict[str, PolicySettings] = field(default_factory=dict)
    issues: list[ValidationIssue] = field(default_factory=list)

    def assets_for(self, asset_class: AssetClass) -> list[Assignable]:
        return list(self.assets.get(asset_class, ()))

    def active_for(self, asset_class: AssetClass) -> frozenset[str]:
        return self.active_assets.get(asset_class, frozenset())

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "DeviceSnapshot":
        if not isinstance(payload, Mapping):
            raise SnapshotError(
                "Snapshot root must be a JSON object",
                category=ErrorCategory.VALIDATION,
            )
        return _SnapshotParser().parse(payload)


def load_snapshot(path: Path) -> DeviceSnapshot:
    """Read and parse a snapshot document from disk."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SnapshotError(
            "Unable to read snapshot",
            category=ErrorCategory.IO,
            source=str(path),
            inner_error=exc,
        ) from exc
    except UnicodeDecodeError as exc:
        raise SnapshotError(
            f"Snapshot is not UTF-8 text (byte offset {exc.start})",
            category=ErrorCategory.FORMAT,
            source=str(path),
            inner_error=exc,
        ) from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(
            f"Invalid JSON at line {exc.lineno}",
            category=ErrorCategory.FORMAT,
            source=str(path),
            inner_error=exc,
        ) from exc
    snapshot = DeviceSnapshot.from_payload(payload)
    logger.info(
        "Snapshot loaded",
        path=str(path),
        assets={
            asset_class.value: len(items) for asset_class, items in snapshot.assets.items()
        },
        issues=len(snapshot.issues),
    )
    return snapshot


class _SnapshotParser:
    def __init__(self) -> None:
        self._issues: list[ValidationIssue] = []

    def parse(self, payload: Mapping[str, Any]) -> DeviceSnapshot:
        device = self._actor(payload, ActorKind.DEVICE)
        if device is None:
            raise SnapshotError(
                "Snapshot has no 'device' section",
                category=ErrorCategory.VALIDATION,
            )

        filters_validator = SnapshotValidator("filters", issue_callback=self._issues.append)
        filters = filters_validator.parse_many(
            AssignmentFilter, _as_list(payload.get("filters"))
        )

        assets: dict[AssetClass, list[Assignable]] = {}
        for asset_class, key in ASSET_COLLECTION_KEYS.items():
            assets[asset_class] = self._assets(key, payload.get(key))

        return DeviceSnapshot(
            device=device,
            primary_user=self._actor(payload, ActorKind.PRIMARY_USER),
            latest_user=self._actor(payload, ActorKind.LATEST_LOGGED_ON_USER),
            filters=filters,
            assets=assets,
            active_assets=self._active_assets(payload.get("activeAssets")),
            policy_settings=self._policy_settings(payload.get("policySettings")),
            issues=list(self._issues),
        )

    def _actor(
        self, payload: Mapping[str, Any], kind: ActorKind
    ) -> ActorMemberships | None:
        raw = payload.get(ACTOR_KEYS[kind])
        if raw is None:
            return None
        if not isinstance(raw, dict):
            raise SnapshotError(
                f"Section '{ACTOR_KEYS[kind]}' must be an object",
                category=ErrorCategory.VALIDATION,
            )
        validator = SnapshotValidator(
            f"{ACTOR_KEYS[kind]}.memberships", issue_callback=self._issues.append
        )
        memberships = validator.parse_many(
            GroupMembership,
            _as_list(raw.get("memberships")),
            builder=GroupMembership.from_directory_object,
        )
        principal_name = (
            raw.get("principalName") or raw.get("userPrincipalName") or raw.get("deviceName")
        )
        return ActorMemberships(
            kind=kind,
            principal_id=_text(raw.get("id")),
            principal_name=_text(principal_name),
            memberships=_unique_memberships(memberships, kind),
        )

    def _assets(self, key: str, raw: Any) -> list[Assignable]:
        validator = SnapshotValidator(key, issue_callback=self._issues.append)
        parsed = validator.parse_many(Assignable, _as_list(raw))
        unique: list[Assignable] = []
        seen: set[str] = set()
        for item in parsed:
            if item.id in seen:
                logger.warning("Duplicate asset id dropped", collection=key, asset_id=item.id)
                continue
            seen.add(item.id)
            unique.append(item)
        return unique

    def _active_assets(self, raw: Any) -> dict[AssetClass, frozenset[str]]:
        active: dict[AssetClass, frozenset[str]] = {}
        if not isinstance(raw, dict):
            return {asset_class: frozenset() for asset_class in AssetClass}
        for asset_class, key in ASSET_COLLECTION_KEYS.items():
            values = raw.get(key)
            if isinstance(values, dict):
                ids = {str(asset_id) for asset_id, flag in values.items() if flag}
            else:
                ids = {str(asset_id) for asset_id in _as_list(values) if asset_id}
            active[asset_class] = frozenset(ids)
        return active

    def _policy_settings(self, raw: Any) -> dict[str, PolicySettings]:
        if raw is None:
            return {}
        validator = SnapshotValidator("policySettings", issue_callback=self._issues.append)
        entries: list[dict[str, Any]] = []
        if isinstance(raw, dict):
            for policy_id, value in raw.items():
                if isinstance(value, list):
                    entries.append({"id": policy_id, "settings": value})
                elif isinstance(value, dict):
                    entries.append({"id": policy_id, **value})
        else:
            entries = [item for item in _as_list(raw) if isinstance(item, dict)]

        result: dict[str, PolicySettings] = {}
        for entry in entries:
            setting_validator = SnapshotValidator(
                f"policySettings.{entry.get('id')}", issue_callback=self._issues.append
            )
            settings = setting_validator.parse_many(
                PolicySetting, _as_list(entry.get("settings"))
            )
            policy = validator.parse(
                PolicySettings,
                {key: value for key, value in entry.items() if key != "settings"},
            )
            if policy is None:
                continue
            result[policy.id] = policy.model_copy(update={"settings": settings})
        return result


def _unique_memberships(
    memberships: list[GroupMembership], kind: ActorKind
) -> list[GroupMembership]:
    unique: dict[str, GroupMembership] = {}
    for membership in memberships:
        if membership.group_id in unique:
            logger.debug(
                "Duplicate membership ignored",
                actor=kind.value,
                group_id=membership.group_id,
            )
            continue
        unique[membership.group_id] = membership
    return list(unique.values())


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, dict) and isinstance(value.get("value"), list):
        return list(value["value"])
    if isinstance(value, list):
        return value
    return [value]


def _text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


__all__ = [
    "ACTOR_KEYS",
    "ASSET_COLLECTION_KEYS",
    "DeviceSnapshot",
    "load_snapshot",
]
