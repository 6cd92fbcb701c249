"""Data layer: snapshot models, boundary parsing and validation."""

from .models import (
    ActorKind,
    ActorMemberships,
    AllDevicesAssignmentTarget,
    AllUsersAssignmentTarget,
    AssetClass,
    Assignable,
    AssignmentContext,
    AssignmentFilter,
    AssignmentFilterPlatform,
    AssignmentFilterType,
    AssignmentTarget,
    AssignmentTargetKind,
    ExclusionGroupAssignmentTarget,
    GraphBaseModel,
    GraphResource,
    GroupAssignmentTarget,
    GroupMembership,
    IncludeExclude,
    MembershipKind,
    PolicySetting,
    PolicySettings,
    ResolvedAssignment,
    SettingDefinition,
    SettingInstance,
    SettingInstanceKind,
    UnsupportedAssignmentTarget,
    parse_assignment_target,
    parse_setting_instance,
)
from .snapshot import ACTOR_KEYS, ASSET_COLLECTION_KEYS, DeviceSnapshot, load_snapshot
from .validation import SnapshotValidator, ValidationIssue

__all__ = [
    "GraphBaseModel",
    "GraphResource",
    "ActorKind",
    "ActorMemberships",
    "GroupMembership",
    "MembershipKind",
    "AssetClass",
    "Assignable",
    "AssignmentTarget",
    "AssignmentTargetKind",
    "AssignmentFilterType",
    "AllUsersAssignmentTarget",
    "AllDevicesAssignmentTarget",
    "GroupAssignmentTarget",
    "ExclusionGroupAssignmentTarget",
    "UnsupportedAssignmentTarget",
    "parse_assignment_target",
    "AssignmentFilter",
    "AssignmentFilterPlatform",
    "AssignmentContext",
    "IncludeExclude",
    "ResolvedAssignment",
    "SettingDefinition",
    "SettingInstance",
    "SettingInstanceKind",
    "PolicySetting",
    "PolicySettings",
    "parse_setting_instance",
    "ACTOR_KEYS",
    "ASSET_COLLECTION_KEYS",
    "DeviceSnapshot",
    "load_snapshot",
    "SnapshotValidator",
    "ValidationIssue",
]
