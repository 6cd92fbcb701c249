from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from intune_insight.data.models import AssignmentFilter, AssignmentFilterType


@dataclass(frozen=True, slots=True)
class FilterAnnotation:
    filter_id: str | None = None
    display_name: str | None = None
    rule_text: str | None = None
    mode: AssignmentFilterType | None = None

    @property
    def is_empty(self) -> bool:
        return self.filter_id is None and self.mode is None


EMPTY_ANNOTATION = FilterAnnotation()


class FilterAnnotator:
    """Resolve assignment filter ids into display names and rule text.

    A mode of ``none`` (any casing) or a missing id means no filter applies.
    Unknown ids keep the raw id with ``display_name=None`` so callers can
    still render something.
    """

    def __init__(self, filters: Iterable[AssignmentFilter] = ()) -> None:
        self._filters = {item.id: item for item in filters}

    def __len__(self) -> int:
        return len(self._filters)

    def resolve(
        self,
        filter_id: str | None,
        filter_mode: AssignmentFilterType | str | None,
    ) -> FilterAnnotation:
        mode = _normalise_mode(filter_mode)
        if mode is None or not filter_id:
            return EMPTY_ANNOTATION
        match = self._filters.get(filter_id)
        if match is None:
            return FilterAnnotation(filter_id=filter_id, mode=mode)
        return FilterAnnotation(
            filter_id=filter_id,
            display_name=match.display_name,
            rule_text=match.rule,
            mode=mode,
        )


def _normalise_mode(value: AssignmentFilterType | str | None) -> AssignmentFilterType | None:
    if value is None:
        return None
    try:
        mode = AssignmentFilterType(value)
    except ValueError:
        return None
    if mode is AssignmentFilterType.NONE:
        return None
    return mode


__all__ = ["EMPTY_ANNOTATION", "FilterAnnotation", "FilterAnnotator"]
