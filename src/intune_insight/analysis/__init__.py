"""Settings Catalog flattening and cross-policy conflict detection."""

from .conflicts import (
    EMPTY_REPORT,
    ConflictAnalyzer,
    ConflictGroup,
    ConflictReport,
    ConflictSeverity,
)
from .walker import (
    PATH_SEPARATOR,
    SECRET_MASK,
    SettingLeaf,
    SettingTreeWalker,
    display_value,
    walk,
    walk_policy,
)

__all__ = [
    "EMPTY_REPORT",
    "ConflictAnalyzer",
    "ConflictGroup",
    "ConflictReport",
    "ConflictSeverity",
    "PATH_SEPARATOR",
    "SECRET_MASK",
    "SettingLeaf",
    "SettingTreeWalker",
    "display_value",
    "walk",
    "walk_policy",
]
