from __future__ import annotations

import csv
import io
import json
from enum import StrEnum
from pathlib import Path
from typing import Any, Iterable, Protocol, TextIO

from intune_insight.analysis import ConflictGroup, ConflictReport
from intune_insight.services.base import EventHook
from intune_insight.services.device_report import DeviceReport
from intune_insight.utils import get_logger


logger = get_logger(__name__)


class ExportFormat(StrEnum):
    JSON = "json"
    CSV = "csv"


class GraphSerializable(Protocol):
    def to_graph(self) -> dict: ...


class ExportService:
    """Generate CSV/JSON exports from a device report."""

    def __init__(self) -> None:
        self.completed: EventHook[Path] = EventHook()

    # ------------------------------------------------------------------ Public

    def report_payload(self, report: DeviceReport) -> dict[str, Any]:
        return {
            "device": {
                "id": report.device_id,
                "name": report.device_name,
                "primaryUser": report.primary_user,
                "latestLoggedOnUser": report.latest_user,
            },
            "assignments": {
                asset_class.value: [row.to_graph() for row in resolution.assignments]
                for asset_class, resolution in report.resolutions.items()
            },
            "unsupportedTargets": [
                {
                    "assetClass": target.asset_class.value,
                    "assetId": target.asset_id,
                    "assetName": target.asset_name,
                    "label": target.label,
                }
                for target in report.unsupported_targets
            ],
            "conflicts": _conflicts_payload(report.conflicts),
            "issues": [
                {
                    "resource": issue.resource,
                    "identifier": issue.identifier,
                    "message": issue.message,
                    "fields": list(issue.fields),
                }
                for issue in report.issues
            ],
        }

    def render(self, report: DeviceReport, fmt: ExportFormat | str) -> str:
        """Render ``report`` as text; CSV covers resolved assignment rows only."""

        match ExportFormat(fmt):
            case ExportFormat.JSON:
                return json.dumps(self.report_payload(report), indent=2)
            case ExportFormat.CSV:
                buffer = io.StringIO()
                _write_csv(buffer, [row.to_graph() for row in report.assignments])
                return buffer.getvalue()

    def export_report_json(self, report: DeviceReport, path: Path) -> Path:
        path.write_text(self.render(report, ExportFormat.JSON), encoding="utf-8")
        logger.debug("Exported device report JSON", path=str(path))
        self.completed.emit(path)
        return path

    def export_assignments_csv(self, report: DeviceReport, path: Path) -> Path:
        rows = report.assignments
        self._write_csv_file(path, rows)
        logger.debug("Exported assignments CSV", path=str(path), count=len(rows))
        self.completed.emit(path)
        return path

    def export_conflicts_csv(self, report: DeviceReport, path: Path) -> Path:
        rows = _conflict_rows(report.conflicts)
        with path.open("w", newline="", encoding="utf-8") as handle:
            _write_csv(handle, rows)
        logger.debug("Exported conflicts CSV", path=str(path), count=len(rows))
        self.completed.emit(path)
        return path

    def export(self, report: DeviceReport, path: Path, fmt: ExportFormat | str) -> Path:
        """Write ``report`` to ``path``.

        CSV holds one table per file, so a report carrying conflict analysis
        also gets a sibling ``<stem>.conflicts.csv``.
        """

        if ExportFormat(fmt) is ExportFormat.JSON:
            return self.export_report_json(report, path)
        self.export_assignments_csv(report, path)
        if report.conflicts is not None:
            self.export_conflicts_csv(report, conflicts_path_for(path))
        return path

    # ----------------------------------------------------------------- Helpers

    def _write_csv_file(self, path: Path, items: Iterable[GraphSerializable]) -> None:
        rows = [item.to_graph() for item in items]
        if not rows:
            path.write_text("")
            return
        with path.open("w", newline="", encoding="utf-8") as handle:
            _write_csv(handle, rows)


def conflicts_path_for(path: Path) -> Path:
    return path.with_name(f"{path.stem}.conflicts.csv")


def _write_csv(handle: TextIO, rows: list[dict[str, Any]]) -> None:
    if not rows:
        return
    header = sorted({key for row in rows for key in row.keys()})
    writer = csv.DictWriter(handle, fieldnames=header)
    writer.writeheader()
    for row in rows:
        writer.writerow(row)


def _group_payload(group: ConflictGroup) -> dict[str, Any]:
    return {
        "settingDefinitionId": group.setting_definition_id,
        "qualifiedName": group.qualified_name,
        "settingName": group.setting_name,
        "severity": group.severity.value,
        "additive": group.additive,
        "policyIds": list(group.policy_ids),
        "values": list(group.values),
        "leaves": [
            {
                "policyId": leaf.owner_policy_id,
                "policyName": leaf.owner_policy_name,
                "value": leaf.value,
            }
            for leaf in group.leaves
        ],
    }


def _conflicts_payload(report: ConflictReport | None) -> dict[str, Any] | None:
    if report is None:
        return None
    return {
        "hasIssues": report.has_issues,
        "conflicts": [_group_payload(group) for group in report.conflicts],
        "warnings": [_group_payload(group) for group in report.warnings],
    }


def _conflict_rows(report: ConflictReport | None) -> list[dict[str, Any]]:
    if report is None:
        return []
    rows: list[dict[str, Any]] = []
    for group in (*report.conflicts, *report.warnings):
        for leaf in group.leaves:
            rows.append(
                {
                    "severity": group.severity.value,
                    "additive": group.additive,
                    "settingDefinitionId": group.setting_definition_id,
                    "qualifiedName": group.qualified_name,
                    "settingName": group.setting_name,
                    "policyId": leaf.owner_policy_id,
                    "policyName": leaf.owner_policy_name,
                    "value": leaf.value,
                }
            )
    return rows


__all__ = ["ExportFormat", "ExportService", "conflicts_path_for"]
