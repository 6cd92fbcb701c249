from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Iterable, Mapping

from intune_insight.analysis.walker import SettingLeaf, walk_policy
from intune_insight.config import DEFAULT_ADDITIVE_SETTINGS
from intune_insight.data.models import PolicySettings
from intune_insight.utils import get_logger


logger = get_logger(__name__)


class ConflictSeverity(StrEnum):
    CONFLICT = "Conflict"
    WARNING = "Warning"


@dataclass(frozen=True, slots=True)
class ConflictGroup:
    """Leaves that set the same setting in more than one policy."""

    setting_definition_id: str
    qualified_name: str
    setting_name: str
    severity: ConflictSeverity
    additive: bool
    leaves: tuple[SettingLeaf, ...]

    @property
    def policy_ids(self) -> tuple[str, ...]:
        return tuple(sorted({leaf.owner_policy_id for leaf in self.leaves}))

    @property
    def values(self) -> tuple[str, ...]:
        return tuple(sorted({leaf.value for leaf in self.leaves}))


@dataclass(frozen=True, slots=True)
class ConflictReport:
    conflicts: tuple[ConflictGroup, ...] = field(default_factory=tuple)
    warnings: tuple[ConflictGroup, ...] = field(default_factory=tuple)

    @property
    def has_issues(self) -> bool:
        return bool(self.conflicts or self.warnings)


EMPTY_REPORT = ConflictReport()


class ConflictAnalyzer:
    """Classify settings repeated across co-assigned configuration policies.

    Comparable leaves are grouped by ``(setting_definition_id,
    qualified_name)``. Groups owned by a single policy are dropped. Settings on
    the additive allow-list merge across policies and are only ever warnings;
    otherwise identical values are a warning and differing values a conflict.
    """

    def __init__(self, additive_settings: Iterable[str] = DEFAULT_ADDITIVE_SETTINGS) -> None:
        self._additive = frozenset(
            name.strip().lower() for name in additive_settings if name.strip()
        )

    def is_additive(self, leaf: SettingLeaf) -> bool:
        candidates = (
            leaf.setting_name,
            leaf.setting_definition_id,
            leaf.qualified_name,
        )
        return any(candidate.lower() in self._additive for candidate in candidates if candidate)

    def analyze(self, leaves: Iterable[SettingLeaf]) -> ConflictReport:
        grouped: dict[tuple[str, str], list[SettingLeaf]] = {}
        for leaf in leaves:
            if not leaf.comparable:
                continue
            grouped.setdefault((leaf.setting_definition_id, leaf.qualified_name), []).append(
                leaf
            )

        conflicts: list[ConflictGroup] = []
        warnings: list[ConflictGroup] = []
        for (definition_id, qualified_name), members in grouped.items():
            if len({leaf.owner_policy_id for leaf in members}) < 2:
                continue
            ordered = tuple(
                sorted(
                    members,
                    key=lambda leaf: (leaf.owner_policy_id, leaf.value, leaf.owner_policy_name),
                )
            )
            additive = all(self.is_additive(leaf) for leaf in ordered)
            if additive or len({leaf.value for leaf in ordered}) == 1:
                severity = ConflictSeverity.WARNING
            else:
                severity = ConflictSeverity.CONFLICT
            group = ConflictGroup(
                setting_definition_id=definition_id,
                qualified_name=qualified_name,
                setting_name=ordered[0].setting_name,
                severity=severity,
                additive=additive,
                leaves=ordered,
            )
            (conflicts if severity is ConflictSeverity.CONFLICT else warnings).append(group)

        report = ConflictReport(
            conflicts=tuple(sorted(conflicts, key=_group_order)),
            warnings=tuple(sorted(warnings, key=_group_order)),
        )
        logger.debug(
            "Conflict analysis complete",
            conflicts=len(report.conflicts),
            warnings=len(report.warnings),
        )
        return report

    def analyze_policies(
        self,
        policies: Iterable[str],
        settings_snapshot: Mapping[str, PolicySettings],
    ) -> ConflictReport:
        """Analyze co-assigned policies by id against their settings snapshot."""

        policy_ids = list(dict.fromkeys(policies))
        if len(policy_ids) < 2:
            return EMPTY_REPORT

        leaves: list[SettingLeaf] = []
        analyzed = 0
        for policy_id in policy_ids:
            policy = settings_snapshot.get(policy_id)
            if policy is None:
                logger.warning("Policy settings missing from snapshot", policy_id=policy_id)
                continue
            analyzed += 1
            leaves.extend(walk_policy(policy))

        if analyzed < 2:
            return EMPTY_REPORT
        return self.analyze(leaves)


def _group_order(group: ConflictGroup) -> tuple[str, str]:
    return (group.qualified_name.lower(), group.setting_definition_id)


__all__ = [
    "EMPTY_REPORT",
    "ConflictAnalyzer",
    "ConflictGroup",
    "ConflictReport",
    "ConflictSeverity",
]
