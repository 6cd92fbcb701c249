from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum

from pydantic import ValidationError


class ErrorCategory(str, Enum):
    IO = "io"
    FORMAT = "format"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class ErrorSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True)
class InsightError(Exception):
    message: str
    category: ErrorCategory = ErrorCategory.UNKNOWN
    source: str | None = None
    inner_error: Exception | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.source:
            return f"{self.message} ({self.source})"
        return self.message

    @property
    def recovery_suggestion(self) -> str | None:
        if self.category is ErrorCategory.IO:
            return "Check that the snapshot path exists and is readable."
        if self.category is ErrorCategory.FORMAT:
            return "Re-export the device snapshot; the document is not valid JSON."
        if self.category is ErrorCategory.VALIDATION:
            return "The snapshot layout is not recognised. Compare it with a fresh export."
        return None


class SnapshotError(InsightError):
    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.FORMAT,
        source: str | None = None,
        inner_error: Exception | None = None,
    ) -> None:
        super().__init__(
            message=message,
            category=category,
            source=source,
            inner_error=inner_error,
        )


@dataclass(slots=True)
class ErrorDescriptor:
    headline: str
    detail: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    suggestion: str | None = None


def describe_exception(error: Exception) -> ErrorDescriptor:
    """Translate an exception into text suitable for console output."""

    descriptor = ErrorDescriptor(
        headline="Operation failed.",
        detail=f"{type(error).__name__}: {error}",
        severity=ErrorSeverity.ERROR,
    )

    insight_error = _locate_insight_error(error)
    if insight_error is not None:
        descriptor.headline = _insight_headline(insight_error)
        descriptor.detail = str(insight_error)
        descriptor.suggestion = insight_error.recovery_suggestion
        return descriptor

    if isinstance(error, ValidationError):
        descriptor.headline = "Snapshot record failed schema validation."
        descriptor.detail = f"{error.error_count()} validation error(s): {error.title}"
        descriptor.severity = ErrorSeverity.WARNING
        return descriptor

    if isinstance(error, json.JSONDecodeError):
        descriptor.headline = "Snapshot is not valid JSON."
        descriptor.detail = f"line {error.lineno}, column {error.colno}: {error.msg}"
        return descriptor

    if isinstance(error, OSError):
        descriptor.headline = "Could not access a file."
        descriptor.detail = f"{type(error).__name__}: {error.strerror or error}"
        return descriptor

    return descriptor


def _locate_insight_error(error: Exception) -> InsightError | None:
    current: BaseException | None = error
    visited: set[int] = set()
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        if isinstance(current, InsightError):
            return current
        current = current.__cause__ or current.__context__
    return None


def _insight_headline(error: InsightError) -> str:
    match error.category:
        case ErrorCategory.IO:
            return "Could not read the device snapshot."
        case ErrorCategory.FORMAT:
            return "The device snapshot is malformed."
        case ErrorCategory.VALIDATION:
            return "The device snapshot failed validation."
        case _:
            return "Device resolution failed."


__all__ = [
    "ErrorCategory",
    "ErrorDescriptor",
    "ErrorSeverity",
    "InsightError",
    "SnapshotError",
    "describe_exception",
]
