"""
Sort and filter policy for the history list.

One table maps each SortSelection to the backend's (field, direction) pair;
the client-side comparator is derived from the same table so the two can
never disagree about relative order.
"""

from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from functools import cmp_to_key
from typing import Any, NamedTuple

from history_sync.domain.models import FilterSelection, HistoryItem, SortSelection, Submission

Comparator = Callable[[Submission, Submission], int]


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortParameters(NamedTuple):
    """Query parameters understood by the submissions endpoint."""

    field_name: str
    direction: SortDirection


SORT_TABLE: dict[SortSelection, SortParameters] = {
    SortSelection.NEWEST_FIRST: SortParameters("submitted_at", SortDirection.DESC),
    SortSelection.OLDEST_FIRST: SortParameters("submitted_at", SortDirection.ASC),
    SortSelection.CATEGORY_ASCENDING: SortParameters("checkin_type", SortDirection.ASC),
    SortSelection.CATEGORY_DESCENDING: SortParameters("checkin_type", SortDirection.DESC),
}

_FIELD_KEYS: dict[str, Callable[[Submission], Any]] = {
    "submitted_at": lambda s: s.submitted_at,
    "checkin_type": lambda s: s.checkin_type.value,
}


def parameters_for(sort: SortSelection) -> SortParameters:
    return SORT_TABLE[sort]


def comparator_for(sort: SortSelection) -> Comparator:
    """Return a three-way comparator (negative, zero, positive) for ``sort``."""
    field_name, direction = SORT_TABLE[sort]
    key = _FIELD_KEYS[field_name]
    sign = -1 if direction is SortDirection.DESC else 1

    def compare(left: Submission, right: Submission) -> int:
        a, b = key(left), key(right)
        return sign * ((a > b) - (a < b))

    return compare


def sort_submissions(records: Iterable[Submission], sort: SortSelection) -> list[Submission]:
    """Stable sort; ties keep their incoming order."""
    return sorted(records, key=cmp_to_key(comparator_for(sort)))


def sort_items(items: Iterable[HistoryItem], sort: SortSelection) -> list[HistoryItem]:
    compare = comparator_for(sort)
    return sorted(items, key=cmp_to_key(lambda a, b: compare(a.submission, b.submission)))


def filter_items(items: Sequence[HistoryItem], selection: FilterSelection) -> list[HistoryItem]:
    return [item for item in items if selection.matches(item.record.category)]
