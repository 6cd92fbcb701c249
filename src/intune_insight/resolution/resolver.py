"""Explain which group (and filter) makes each asset apply to a device.

One :class:`AssignmentResolver` serves applications, configuration policies
and scripts alike; the only per-class differences live in
:class:`AssetClassProfile`.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Callable, Iterable

from intune_insight.data.models import (
    ActorKind,
    AssetClass,
    Assignable,
    AssignmentContext,
    AssignmentTarget,
    AssignmentTargetKind,
    GroupMembership,
    IncludeExclude,
    ResolvedAssignment,
    UnsupportedAssignmentTarget,
)
from intune_insight.data.snapshot import DeviceSnapshot
from intune_insight.resolution.filters import EMPTY_ANNOTATION, FilterAnnotation, FilterAnnotator
from intune_insight.resolution.membership import MembershipIndex
from intune_insight.utils import get_logger


logger = get_logger(__name__)

ALL_USERS_GROUP_NAME = "All Users"
ALL_DEVICES_GROUP_NAME = "All Devices"
UNKNOWN_ASSIGNMENT_GROUP_NAME = (
    "unknown (possible nested group, removed assignment, or user-targeted group not evaluated)"
)

StateExtractor = Callable[[Assignable], str | None]


def _reported_state(missing: str | None) -> StateExtractor:
    def extract(asset: Assignable) -> str | None:
        return asset.state or missing

    return extract


@dataclass(frozen=True, slots=True)
class AssetClassProfile:
    asset_class: AssetClass
    state_of: StateExtractor = field(default=_reported_state(None))
    unknown_group_name: str = UNKNOWN_ASSIGNMENT_GROUP_NAME


APPLICATION_PROFILE = AssetClassProfile(
    asset_class=AssetClass.APPLICATION,
    state_of=_reported_state("Install state not reported"),
)
CONFIGURATION_POLICY_PROFILE = AssetClassProfile(
    asset_class=AssetClass.CONFIGURATION_POLICY,
    state_of=_reported_state("Policy state not reported"),
)
SCRIPT_PROFILE = AssetClassProfile(
    asset_class=AssetClass.SCRIPT,
    state_of=_reported_state("Detection state not reported"),
)

PROFILES: dict[AssetClass, AssetClassProfile] = {
    profile.asset_class: profile
    for profile in (APPLICATION_PROFILE, CONFIGURATION_POLICY_PROFILE, SCRIPT_PROFILE)
}


@dataclass(frozen=True, slots=True)
class ActorIndexes:
    """The three membership indexes a resolution run evaluates."""

    device: MembershipIndex
    primary_user: MembershipIndex
    latest_user: MembershipIndex

    @classmethod
    def from_snapshot(cls, snapshot: DeviceSnapshot) -> "ActorIndexes":
        return cls(
            device=MembershipIndex.from_actor(snapshot.device, ActorKind.DEVICE),
            primary_user=MembershipIndex.from_actor(
                snapshot.primary_user, ActorKind.PRIMARY_USER
            ),
            latest_user=MembershipIndex.from_actor(
                snapshot.latest_user, ActorKind.LATEST_LOGGED_ON_USER
            ),
        )

    @property
    def latest_user_is_distinct(self) -> bool:
        return not self.latest_user.same_principal(self.primary_user)

    @property
    def primary_user_principal_name(self) -> str | None:
        return self.primary_user.principal_name

    @property
    def latest_user_principal_name(self) -> str | None:
        if not self.latest_user_is_distinct:
            return None
        return self.latest_user.principal_name


@dataclass(frozen=True, slots=True)
class UnsupportedTarget:
    asset_class: AssetClass
    asset_id: str
    asset_name: str
    label: str


@dataclass(slots=True)
class AssetResolution:
    asset_class: AssetClass
    assignments: list[ResolvedAssignment] = field(default_factory=list)
    unsupported_targets: list[UnsupportedTarget] = field(default_factory=list)

    @property
    def unknown_count(self) -> int:
        return sum(1 for row in self.assignments if row.is_unknown)

    def applied_asset_ids(self) -> list[str]:
        """Ids that reach the device, in first-seen order.

        An asset with any ``Excluded`` row is left out even when another row
        includes it, since exclusions take precedence on the platform.
        """

        excluded = {
            row.asset_id
            for row in self.assignments
            if row.include_exclude is IncludeExclude.EXCLUDED
        }
        seen: dict[str, None] = {}
        for row in self.assignments:
            if row.asset_id not in excluded:
                seen.setdefault(row.asset_id, None)
        return list(seen)


@dataclass(frozen=True, slots=True)
class _GroupMatch:
    context: AssignmentContext
    membership: GroupMembership
    user_principal_name: str | None


class AssignmentResolver:
    """Resolve the assignment targets of one asset class against a device."""

    def __init__(
        self,
        profile: AssetClassProfile,
        actors: ActorIndexes,
        filters: FilterAnnotator,
    ) -> None:
        self._profile = profile
        self._actors = actors
        self._filters = filters

    @property
    def profile(self) -> AssetClassProfile:
        return self._profile

    def resolve(
        self,
        assignable: Assignable,
        *,
        platform_active: bool = False,
    ) -> list[ResolvedAssignment]:
        rows, _ = self._resolve(assignable, platform_active=platform_active)
        return rows

    def resolve_all(
        self,
        assignables: Iterable[Assignable],
        *,
        active_asset_ids: Collection[str] = frozenset(),
    ) -> AssetResolution:
        result = AssetResolution(asset_class=self._profile.asset_class)
        seen_ids: set[str] = set()
        for assignable in assignables:
            if assignable.id in seen_ids:
                logger.warning(
                    "Duplicate asset id skipped",
                    asset_class=self._profile.asset_class.value,
                    asset_id=assignable.id,
                )
                continue
            seen_ids.add(assignable.id)
            rows, unsupported = self._resolve(
                assignable,
                platform_active=assignable.id in active_asset_ids,
            )
            result.assignments.extend(rows)
            result.unsupported_targets.extend(unsupported)

        orphaned = [asset_id for asset_id in active_asset_ids if asset_id not in seen_ids]
        if orphaned:
            logger.debug(
                "Active assets missing from collection",
                asset_class=self._profile.asset_class.value,
                count=len(orphaned),
            )
        logger.debug(
            "Asset class resolved",
            asset_class=self._profile.asset_class.value,
            assets=len(seen_ids),
            rows=len(result.assignments),
            unknown=result.unknown_count,
            unsupported=len(result.unsupported_targets),
        )
        return result

    # ----------------------------------------------------------------- Helpers

    def _resolve(
        self,
        assignable: Assignable,
        *,
        platform_active: bool,
    ) -> tuple[list[ResolvedAssignment], list[UnsupportedTarget]]:
        rows: list[ResolvedAssignment] = []
        unsupported: list[UnsupportedTarget] = []

        for target in assignable.assignments:
            if target.kind is AssignmentTargetKind.UNSUPPORTED:
                label = (
                    target.label
                    if isinstance(target, UnsupportedAssignmentTarget)
                    else f"unsupported assignment target ({target.odata_type})"
                )
                logger.warning(
                    "Unsupported assignment target",
                    asset_class=self._profile.asset_class.value,
                    asset_id=assignable.id,
                    target=label,
                )
                unsupported.append(
                    UnsupportedTarget(
                        asset_class=self._profile.asset_class,
                        asset_id=assignable.id,
                        asset_name=assignable.display_name,
                        label=label,
                    )
                )
                continue
            row = self._resolve_target(assignable, target)
            if row is not None:
                rows.append(row)

        if platform_active and not rows:
            rows.append(self._unknown_row(assignable))

        return self._deduplicate(rows), unsupported

    def _resolve_target(
        self,
        assignable: Assignable,
        target: AssignmentTarget,
    ) -> ResolvedAssignment | None:
        match target.kind:
            case AssignmentTargetKind.ALL_USERS:
                return self._row(
                    assignable,
                    target,
                    context=AssignmentContext.USER,
                    include_exclude=IncludeExclude.NONE,
                    group_name=ALL_USERS_GROUP_NAME,
                    group_id=None,
                    user_principal_name=(
                        self._actors.primary_user_principal_name
                        or self._actors.latest_user_principal_name
                    ),
                )
            case AssignmentTargetKind.ALL_DEVICES:
                return self._row(
                    assignable,
                    target,
                    context=AssignmentContext.DEVICE,
                    include_exclude=IncludeExclude.NONE,
                    group_name=ALL_DEVICES_GROUP_NAME,
                    group_id=None,
                    user_principal_name=None,
                )
            case AssignmentTargetKind.GROUP_INCLUDE | AssignmentTargetKind.GROUP_EXCLUDE:
                matched = self._match_group(target.group_id)
                if matched is None:
                    return None
                include_exclude = (
                    IncludeExclude.INCLUDED
                    if target.kind is AssignmentTargetKind.GROUP_INCLUDE
                    else IncludeExclude.EXCLUDED
                )
                return self._row(
                    assignable,
                    target,
                    context=matched.context,
                    include_exclude=include_exclude,
                    group_name=matched.membership.display_name or matched.membership.group_id,
                    group_id=matched.membership.group_id,
                    user_principal_name=matched.user_principal_name,
                )
            case _:
                return None

    def _match_group(self, group_id: str | None) -> _GroupMatch | None:
        actors = self._actors
        device_hit = actors.device.lookup(group_id)
        primary_hit = actors.primary_user.lookup(group_id)
        latest_hit = (
            actors.latest_user.lookup(group_id) if actors.latest_user_is_distinct else None
        )

        context: AssignmentContext | None = None
        membership = device_hit
        user_principal_name: str | None = None

        if device_hit is not None:
            context = AssignmentContext.DEVICE

        if primary_hit is not None:
            context = (
                AssignmentContext.MIXED_DEVICE_USER
                if context is AssignmentContext.DEVICE
                else AssignmentContext.USER
            )
            membership = membership or primary_hit
            user_principal_name = actors.primary_user.principal_name

        if latest_hit is not None and primary_hit is None:
            if context is AssignmentContext.DEVICE:
                context = AssignmentContext.MIXED_DEVICE_USER
            else:
                context = AssignmentContext.USER
                membership = latest_hit
            user_principal_name = actors.latest_user.principal_name

        if context is None or membership is None:
            return None
        return _GroupMatch(
            context=context,
            membership=membership,
            user_principal_name=user_principal_name,
        )

    def _row(
        self,
        assignable: Assignable,
        target: AssignmentTarget,
        *,
        context: AssignmentContext,
        include_exclude: IncludeExclude,
        group_name: str,
        group_id: str | None,
        user_principal_name: str | None,
    ) -> ResolvedAssignment:
        annotation = self._filters.resolve(target.filter_id, target.filter_mode)
        return self._build(
            assignable,
            context=context,
            include_exclude=include_exclude,
            group_name=group_name,
            group_id=group_id,
            annotation=annotation,
            user_principal_name=user_principal_name,
        )

    def _unknown_row(self, assignable: Assignable) -> ResolvedAssignment:
        logger.debug(
            "Active asset has no resolvable assignment",
            asset_class=self._profile.asset_class.value,
            asset_id=assignable.id,
        )
        return self._build(
            assignable,
            context=AssignmentContext.UNKNOWN,
            include_exclude=IncludeExclude.NONE,
            group_name=self._profile.unknown_group_name,
            group_id=None,
            annotation=EMPTY_ANNOTATION,
            user_principal_name=None,
        )

    def _build(
        self,
        assignable: Assignable,
        *,
        context: AssignmentContext,
        include_exclude: IncludeExclude,
        group_name: str,
        group_id: str | None,
        annotation: FilterAnnotation,
        user_principal_name: str | None,
    ) -> ResolvedAssignment:
        return ResolvedAssignment(
            asset_id=assignable.id,
            asset_name=assignable.display_name,
            asset_type_tag=assignable.asset_type_tag,
            asset_class=self._profile.asset_class,
            context=context,
            include_exclude=include_exclude,
            assignment_group_name=group_name,
            assignment_group_id=group_id,
            filter_id=annotation.filter_id,
            filter_display_name=annotation.display_name,
            filter_mode=annotation.mode,
            filter_rule=annotation.rule_text,
            user_principal_name=user_principal_name,
            state=self._profile.state_of(assignable),
        )

    def _deduplicate(self, rows: list[ResolvedAssignment]) -> list[ResolvedAssignment]:
        return deduplicate_assignments(
            rows,
            primary_user_principal_name=self._actors.primary_user_principal_name,
            latest_user_principal_name=self._actors.latest_user_principal_name,
        )


def deduplicate_assignments(
    rows: Iterable[ResolvedAssignment],
    *,
    primary_user_principal_name: str | None = None,
    latest_user_principal_name: str | None = None,
) -> list[ResolvedAssignment]:
    """Coalesce rows that only differ by which user principal produced them.

    The surviving row keeps the primary user's principal name when any of the
    coalesced rows carried it, else the latest logged-on user's, else none.
    First-seen order is preserved.
    """

    grouped: dict[tuple, list[ResolvedAssignment]] = {}
    for row in rows:
        grouped.setdefault(row.dedup_key(), []).append(row)

    result: list[ResolvedAssignment] = []
    for duplicates in grouped.values():
        first = duplicates[0]
        if len(duplicates) == 1:
            result.append(first)
            continue
        names = {row.user_principal_name for row in duplicates if row.user_principal_name}
        if primary_user_principal_name and primary_user_principal_name in names:
            chosen = primary_user_principal_name
        elif latest_user_principal_name and latest_user_principal_name in names:
            chosen = latest_user_principal_name
        else:
            chosen = None
        result.append(first.model_copy(update={"user_principal_name": chosen}))
    return result


def build_resolvers(
    actors: ActorIndexes,
    filters: FilterAnnotator,
    profiles: Iterable[AssetClassProfile] | None = None,
) -> dict[AssetClass, AssignmentResolver]:
    """One resolver per asset class, all sharing the same actor indexes."""

    return {
        profile.asset_class: AssignmentResolver(profile, actors, filters)
        for profile in (profiles or PROFILES.values())
    }


__all__ = [
    "ALL_DEVICES_GROUP_NAME",
    "ALL_USERS_GROUP_NAME",
    "UNKNOWN_ASSIGNMENT_GROUP_NAME",
    "APPLICATION_PROFILE",
    "CONFIGURATION_POLICY_PROFILE",
    "SCRIPT_PROFILE",
    "PROFILES",
    "ActorIndexes",
    "AssetClassProfile",
    "AssetResolution",
    "AssignmentResolver",
    "UnsupportedTarget",
    "build_resolvers",
    "deduplicate_assignments",
]
