from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, TypeVar

from intune_insight.analysis import ConflictAnalyzer, ConflictReport
from intune_insight.config import Settings
from intune_insight.data import (
    AssetClass,
    DeviceSnapshot,
    ResolvedAssignment,
    ValidationIssue,
    load_snapshot,
)
from intune_insight.resolution import (
    ActorIndexes,
    AssetResolution,
    FilterAnnotator,
    UnsupportedTarget,
    build_resolvers,
)
from intune_insight.services.base import EventHook
from intune_insight.utils import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

# Upper bound on ids per directory batch request when collaborators enrich
# memberships with member counts before building a snapshot.
MEMBERSHIP_BATCH_SIZE = 20


def batched(items: Sequence[T], size: int = MEMBERSHIP_BATCH_SIZE) -> List[List[T]]:
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


@dataclass(slots=True)
class DeviceReport:
    device_id: str | None
    device_name: str | None
    primary_user: str | None = None
    latest_user: str | None = None
    resolutions: dict[AssetClass, AssetResolution] = field(default_factory=dict)
    conflicts: ConflictReport | None = None
    issues: list[ValidationIssue] = field(default_factory=list)

    def assignments_for(self, asset_class: AssetClass) -> list[ResolvedAssignment]:
        resolution = self.resolutions.get(asset_class)
        return list(resolution.assignments) if resolution else []

    @property
    def assignments(self) -> list[ResolvedAssignment]:
        rows: list[ResolvedAssignment] = []
        for asset_class in AssetClass:
            rows.extend(self.assignments_for(asset_class))
        return rows

    @property
    def unsupported_targets(self) -> list[UnsupportedTarget]:
        targets: list[UnsupportedTarget] = []
        for asset_class in AssetClass:
            resolution = self.resolutions.get(asset_class)
            if resolution is not None:
                targets.extend(resolution.unsupported_targets)
        return targets

    @property
    def unknown_count(self) -> int:
        return sum(resolution.unknown_count for resolution in self.resolutions.values())


class DeviceReportService:
    """Resolve every asset class for one device and optionally analyze conflicts."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._analyzer = ConflictAnalyzer(self._settings.configured_additive_settings())
        self.completed: EventHook[DeviceReport] = EventHook()

    @property
    def settings(self) -> Settings:
        return self._settings

    def build(self, snapshot: DeviceSnapshot, *, extended: bool | None = None) -> DeviceReport:
        extended = self._settings.extended_report if extended is None else extended

        actors = ActorIndexes.from_snapshot(snapshot)
        resolvers = build_resolvers(actors, FilterAnnotator(snapshot.filters))
        resolutions = {
            asset_class: resolvers[asset_class].resolve_all(
                snapshot.assets_for(asset_class),
                active_asset_ids=snapshot.active_for(asset_class),
            )
            for asset_class in AssetClass
        }

        conflicts: ConflictReport | None = None
        if extended:
            co_assigned = resolutions[AssetClass.CONFIGURATION_POLICY].applied_asset_ids()
            conflicts = self._analyzer.analyze_policies(co_assigned, snapshot.policy_settings)

        report = DeviceReport(
            device_id=snapshot.device.principal_id,
            device_name=snapshot.device.principal_name,
            primary_user=actors.primary_user_principal_name,
            latest_user=actors.latest_user_principal_name,
            resolutions=resolutions,
            conflicts=conflicts,
            issues=list(snapshot.issues),
        )
        logger.info(
            "Device report built",
            device=report.device_name or report.device_id,
            rows=len(report.assignments),
            unknown=report.unknown_count,
            unsupported=len(report.unsupported_targets),
            conflicts=len(conflicts.conflicts) if conflicts else None,
            warnings=len(conflicts.warnings) if conflicts else None,
        )
        self.completed.emit(report)
        return report

    def build_from_path(self, path: Path, *, extended: bool | None = None) -> DeviceReport:
        return self.build(load_snapshot(path), extended=extended)


__all__ = [
    "MEMBERSHIP_BATCH_SIZE",
    "DeviceReport",
    "DeviceReportService",
    "batched",
]
