"""Shared utility helpers for intune-insight."""

from .errors import (
    ErrorCategory,
    ErrorDescriptor,
    ErrorSeverity,
    InsightError,
    SnapshotError,
    describe_exception,
)
from .logging import LoggingOptions, configure_logging, get_logger, log_file_path

__all__ = [
    "LoggingOptions",
    "configure_logging",
    "get_logger",
    "log_file_path",
    "ErrorCategory",
    "ErrorDescriptor",
    "ErrorSeverity",
    "InsightError",
    "SnapshotError",
    "describe_exception",
]
