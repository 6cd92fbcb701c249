"""Assignment resolution against one device and its users."""

from .filters import EMPTY_ANNOTATION, FilterAnnotation, FilterAnnotator
from .membership import MembershipIndex
from .resolver import (
    ALL_DEVICES_GROUP_NAME,
    ALL_USERS_GROUP_NAME,
    APPLICATION_PROFILE,
    CONFIGURATION_POLICY_PROFILE,
    PROFILES,
    SCRIPT_PROFILE,
    UNKNOWN_ASSIGNMENT_GROUP_NAME,
    ActorIndexes,
    AssetClassProfile,
    AssetResolution,
    AssignmentResolver,
    UnsupportedTarget,
    build_resolvers,
    deduplicate_assignments,
)

__all__ = [
    "EMPTY_ANNOTATION",
    "FilterAnnotation",
    "FilterAnnotator",
    "MembershipIndex",
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
