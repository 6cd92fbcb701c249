from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Type, TypeVar

from pydantic import ValidationError

from intune_insight.data.models import GraphBaseModel
from intune_insight.utils import get_logger


logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=GraphBaseModel)


@dataclass(slots=True)
class ValidationIssue:
    """Represents a schema validation failure for one snapshot record."""

    resource: str
    identifier: str | None
    message: str
    detail: str | None = None
    fields: tuple[str, ...] = field(default_factory=tuple)


class SnapshotValidator:
    """Validate snapshot records, skipping the ones that do not fit the schema."""

    def __init__(
        self,
        resource: str,
        *,
        issue_callback: Callable[[ValidationIssue], None] | None = None,
    ) -> None:
        self._resource = resource
        self._issue_callback = issue_callback

    @property
    def resource(self) -> str:
        return self._resource

    # ------------------------------------------------------------------ Public

    def parse(
        self,
        model: Type[ModelT],
        payload: Any,
        *,
        builder: Callable[[dict[str, Any]], ModelT] | None = None,
    ) -> ModelT | None:
        """Validate and parse a single record; ``None`` when it is rejected."""

        if not isinstance(payload, dict):
            self._record_issue(
                ValidationIssue(
                    resource=self._resource,
                    identifier=None,
                    message=f"Expected an object, got {type(payload).__name__}",
                ),
                errors=None,
            )
            return None
        try:
            if builder is not None:
                return builder(payload)
            return model.from_graph(payload)
        except ValidationError as exc:
            issue = self._build_issue(payload, exc)
            self._record_issue(issue, errors=exc.errors())
            return None

    def parse_many(
        self,
        model: Type[ModelT],
        payloads: Iterable[Any] | None,
        *,
        builder: Callable[[dict[str, Any]], ModelT] | None = None,
    ) -> list[ModelT]:
        """Validate and parse an iterable, skipping invalid records."""

        items: list[ModelT] = []
        for payload in payloads or ():
            item = self.parse(model, payload, builder=builder)
            if item is not None:
                items.append(item)
        return items

    # ----------------------------------------------------------------- Helpers

    def _build_issue(
        self,
        payload: dict[str, Any],
        exc: ValidationError,
    ) -> ValidationIssue:
        raw_id = payload.get("id")
        identifier = str(raw_id) if raw_id is not None else None
        fields = tuple(
            ".".join(str(segment) for segment in error.get("loc", ()))
            for error in exc.errors()
        )
        return ValidationIssue(
            resource=self._resource,
            identifier=identifier,
            message="Snapshot record failed schema validation",
            detail=exc.json(),
            fields=fields,
        )

    def _record_issue(self, issue: ValidationIssue, *, errors: Any) -> None:
        field_list = ", ".join(issue.fields) if issue.fields else "unknown"
        logger.warning(
            "Snapshot record skipped",
            resource=self._resource,
            identifier=issue.identifier,
            reason=issue.message,
            fields=field_list,
            errors=errors,
        )
        if self._issue_callback is not None:
            try:
                self._issue_callback(issue)
            except Exception:  # pragma: no cover - callbacks should not break validation
                logger.exception("Validation issue callback raised an exception")


__all__: List[str] = ["SnapshotValidator", "ValidationIssue"]
