"""Domain models for device assignment snapshots and their resolution."""

from .assignable import AssetClass, Assignable
from .assignment import (
    AllDevicesAssignmentTarget,
    AllUsersAssignmentTarget,
    AssignmentFilterType,
    AssignmentTarget,
    AssignmentTargetKind,
    ExclusionGroupAssignmentTarget,
    GroupAssignmentTarget,
    UnsupportedAssignmentTarget,
    parse_assignment_target,
)
from .common import GraphBaseModel, GraphResource, odata_suffix
from .filters import AssignmentFilter, AssignmentFilterPlatform
from .group import ActorKind, ActorMemberships, GroupMembership, MembershipKind
from .resolution import AssignmentContext, IncludeExclude, ResolvedAssignment
from .settings_catalog import (
    ChoiceSettingCollectionInstance,
    ChoiceSettingInstance,
    ChoiceSettingValue,
    GroupSettingCollectionInstance,
    GroupSettingInstance,
    GroupSettingValue,
    PolicySetting,
    PolicySettings,
    SettingDefinition,
    SettingInstance,
    SettingInstanceKind,
    SettingOption,
    SimpleSettingCollectionInstance,
    SimpleSettingInstance,
    SimpleSettingValue,
    UnknownSettingInstance,
    parse_setting_instance,
)

__all__ = [
    "GraphBaseModel",
    "GraphResource",
    "odata_suffix",
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
    "ActorKind",
    "ActorMemberships",
    "GroupMembership",
    "MembershipKind",
    "AssignmentContext",
    "IncludeExclude",
    "ResolvedAssignment",
    "SettingInstanceKind",
    "SettingInstance",
    "ChoiceSettingInstance",
    "SimpleSettingInstance",
    "GroupSettingInstance",
    "GroupSettingCollectionInstance",
    "ChoiceSettingCollectionInstance",
    "SimpleSettingCollectionInstance",
    "UnknownSettingInstance",
    "ChoiceSettingValue",
    "GroupSettingValue",
    "SimpleSettingValue",
    "SettingOption",
    "SettingDefinition",
    "PolicySetting",
    "PolicySettings",
    "parse_setting_instance",
]
