from __future__ import annotations

from typing import Iterable, Iterator, Self

from intune_insight.data.models import ActorKind, ActorMemberships, GroupMembership
from intune_insight.utils import get_logger


logger = get_logger(__name__)


class MembershipIndex:
    """Read-only ``group_id`` lookup over one actor's memberships."""

    __slots__ = ("_actor", "_principal_id", "_principal_name", "_by_group")

    def __init__(
        self,
        actor: ActorKind,
        by_group: dict[str, GroupMembership],
        *,
        principal_id: str | None = None,
        principal_name: str | None = None,
    ) -> None:
        self._actor = actor
        self._principal_id = principal_id
        self._principal_name = principal_name
        self._by_group = by_group

    @classmethod
    def build(
        cls,
        memberships: Iterable[GroupMembership],
        *,
        actor: ActorKind,
        principal_id: str | None = None,
        principal_name: str | None = None,
    ) -> Self:
        by_group: dict[str, GroupMembership] = {}
        for membership in memberships:
            if membership.group_id in by_group:
                logger.debug(
                    "Duplicate membership ignored",
                    actor=actor.value,
                    group_id=membership.group_id,
                )
                continue
            by_group[membership.group_id] = membership
        return cls(
            actor,
            by_group,
            principal_id=principal_id,
            principal_name=principal_name,
        )

    @classmethod
    def from_actor(cls, actor: ActorMemberships | None, kind: ActorKind) -> Self:
        if actor is None:
            return cls.empty(kind)
        return cls.build(
            actor.memberships,
            actor=kind,
            principal_id=actor.principal_id,
            principal_name=actor.principal_name,
        )

    @classmethod
    def empty(cls, actor: ActorKind) -> Self:
        return cls(actor, {})

    @property
    def actor(self) -> ActorKind:
        return self._actor

    @property
    def principal_id(self) -> str | None:
        return self._principal_id

    @property
    def principal_name(self) -> str | None:
        return self._principal_name

    def contains(self, group_id: str | None) -> bool:
        return group_id is not None and group_id in self._by_group

    def lookup(self, group_id: str | None) -> GroupMembership | None:
        if group_id is None:
            return None
        return self._by_group.get(group_id)

    def same_principal(self, other: "MembershipIndex") -> bool:
        """True when both indexes describe the same directory principal.

        Principal ids are compared first; principal names (case-insensitive)
        are the fallback when either id is missing.
        """

        if self._principal_id and other._principal_id:
            return self._principal_id == other._principal_id
        if self._principal_name and other._principal_name:
            return self._principal_name.lower() == other._principal_name.lower()
        return False

    def __contains__(self, group_id: object) -> bool:
        return isinstance(group_id, str) and group_id in self._by_group

    def __iter__(self) -> Iterator[GroupMembership]:
        return iter(self._by_group.values())

    def __len__(self) -> int:
        return len(self._by_group)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return (
            f"MembershipIndex(actor={self._actor.value!r}, "
            f"principal={self._principal_name or self._principal_id!r}, "
            f"groups={len(self._by_group)})"
        )


__all__ = ["MembershipIndex"]
