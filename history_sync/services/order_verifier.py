"""
Trust-but-verify check on server-provided ordering.

The backend is the preferred sorter; the client only re-sorts when a single
linear scan finds an adjacent inversion.
"""

from collections.abc import Sequence

from history_sync.domain.models import SortSelection, Submission
from history_sync.services.sort_policy import comparator_for


def first_inversion(records: Sequence[Submission], sort: SortSelection) -> int | None:
    """Index ``i`` of the first pair where ``records[i]`` must come after ``records[i + 1]``."""
    compare = comparator_for(sort)
    for index in range(len(records) - 1):
        if compare(records[index], records[index + 1]) > 0:
            return index
    return None


def is_sorted(records: Sequence[Submission], sort: SortSelection) -> bool:
    return first_inversion(records, sort) is None
