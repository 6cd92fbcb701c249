from __future__ import annotations

from enum import StrEnum
from typing import Any, Self

from pydantic import AliasChoices, Field, field_validator

from .common import GraphBaseModel

DIRECTORY_ROLE_ODATA_TYPE = "#microsoft.graph.directoryRole"
DYNAMIC_GROUP_TYPE = "DynamicMembership"


class MembershipKind(StrEnum):
    ASSIGNED = "Assigned"
    DYNAMIC = "Dynamic"
    DIRECTORY_ROLE = "DirectoryRole"

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            normalised = value.replace(" ", "").lower()
            for member in cls:
                if member.value.lower() == normalised:
                    return member
        return None


class ActorKind(StrEnum):
    DEVICE = "device"
    PRIMARY_USER = "primaryUser"
    LATEST_LOGGED_ON_USER = "latestLoggedOnUser"


class GroupMembership(GraphBaseModel):
    """One directory group (or role) an actor is a transitive member of."""

    group_id: str = Field(alias="id", validation_alias=AliasChoices("id", "groupId"))
    display_name: str = Field(
        default="",
        alias="displayName",
        validation_alias=AliasChoices("displayName", "name"),
    )
    kind: MembershipKind = Field(default=MembershipKind.ASSIGNED, alias="membershipKind")
    device_member_count: int | None = Field(default=None, alias="deviceMemberCount")
    user_member_count: int | None = Field(default=None, alias="userMemberCount")
    dynamic_rule_text: str | None = Field(
        default=None,
        alias="membershipRule",
        validation_alias=AliasChoices("membershipRule", "dynamicRuleText"),
    )

    @field_validator("display_name", mode="before")
    @classmethod
    def _coerce_display_name(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_directory_object(cls, payload: dict[str, Any]) -> Self:
        """Build a membership from a raw ``transitiveMemberOf`` directory object.

        Directory roles and dynamic groups are recognised from the payload so
        that callers never need to probe ``@odata.type`` or ``groupTypes``
        themselves.
        """

        data = dict(payload)
        if "membershipKind" not in data and "kind" not in data:
            odata_type = data.get("@odata.type")
            group_types = data.get("groupTypes") or []
            if odata_type == DIRECTORY_ROLE_ODATA_TYPE:
                data["membershipKind"] = MembershipKind.DIRECTORY_ROLE
            elif DYNAMIC_GROUP_TYPE in group_types:
                data["membershipKind"] = MembershipKind.DYNAMIC
            else:
                data["membershipKind"] = MembershipKind.ASSIGNED
        elif "kind" in data and "membershipKind" not in data:
            data["membershipKind"] = data.pop("kind")
        return cls.model_validate(data)

    @property
    def is_dynamic(self) -> bool:
        return self.kind is MembershipKind.DYNAMIC


class ActorMemberships(GraphBaseModel):
    """Membership snapshot of a single actor (device or user)."""

    kind: ActorKind
    principal_id: str | None = Field(default=None, alias="id")
    principal_name: str | None = Field(
        default=None,
        alias="principalName",
        validation_alias=AliasChoices("principalName", "userPrincipalName", "deviceName"),
    )
    memberships: list[GroupMembership] = Field(default_factory=list)

    @field_validator("memberships", mode="before")
    @classmethod
    def _coerce_memberships(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        return [
            GroupMembership.from_directory_object(item) if isinstance(item, dict) else item
            for item in value
        ]


__all__ = [
    "ActorKind",
    "ActorMemberships",
    "GroupMembership",
    "MembershipKind",
]
