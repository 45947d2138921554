"""
History reconciliation: fetch -> convert -> verify order -> (re-sort) -> publish.

State machine::

    idle --load--> loading --ok--> loaded
                           --err-> failed (fallback dataset published)
    any  --load--> loading (supersedes the in-flight request)

All transitions happen on the event loop thread, so no locks are needed.
The "newest request wins" rule is enforced twice: the superseded task is
cancelled, and a generation counter turns any completion that still slips
through into a no-op.
"""

import asyncio
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict

from history_sync.config import HistoryConfig
from history_sync.domain.models import FilterSelection, HistoryItem, SortSelection, Submission
from history_sync.services.errors import HistoryFetchError
from history_sync.services.fallback import build_fallback_submissions
from history_sync.services.order_verifier import first_inversion
from history_sync.services.result import Result
from history_sync.services.sort_policy import (
    filter_items,
    parameters_for,
    sort_items,
    sort_submissions,
)
from history_sync.services.submissions_client import SubmissionsSource

logger = structlog.get_logger(__name__)

HistoryObserver = Callable[["HistoryState"], None]


class ReconcilePhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class HistoryState(BaseModel):
    """Snapshot published to the UI layer after every transition."""

    model_config = ConfigDict(frozen=True)

    phase: ReconcilePhase = ReconcilePhase.IDLE
    items: tuple[HistoryItem, ...] = ()
    is_loading: bool = False
    error_message: str | None = None
    filter: FilterSelection = FilterSelection.ALL
    sort: SortSelection = SortSelection.NEWEST_FIRST
    used_fallback: bool = False


class HistoryReconciler:
    """
    Owns the history list for one screen.

    Filter changes are applied to the already-loaded items without a fetch.
    Sort changes re-sort locally right away, then re-fetch so the backend's
    ordering can be checked again.
    """

    def __init__(
        self,
        source: SubmissionsSource,
        config: HistoryConfig | None = None,
        *,
        aggregate: bool = True,
        fallback_factory: Callable[[], list[Submission]] = build_fallback_submissions,
    ) -> None:
        self.source = source
        self.config = config or HistoryConfig()
        self.aggregate = aggregate
        self.fallback_factory = fallback_factory
        self.logger = logger.bind(component="history_reconciler")

        self._state = HistoryState(sort=self.config.default_sort, filter=self.config.default_filter)
        self._sorted_items: list[HistoryItem] = []
        self._observers: list[HistoryObserver] = []
        self._generation = 0
        self._inflight: asyncio.Task[None] | None = None

    @property
    def state(self) -> HistoryState:
        return self._state

    def subscribe(self, observer: HistoryObserver) -> Callable[[], None]:
        """Register an observer; it is called with every new state. Returns an unsubscribe callable."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def request_load(self) -> asyncio.Task[None]:
        """Start a load for the current sort, superseding any in-flight one."""
        self._generation += 1
        generation = self._generation

        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
            self.logger.info("history_load_superseded", generation=generation - 1)

        sort = self._state.sort
        self._publish(phase=ReconcilePhase.LOADING, is_loading=True, error_message=None)
        self.logger.info("history_load_started", generation=generation, sort=sort.value)

        task = asyncio.create_task(self._load(generation, sort), name=f"history-load-{generation}")
        self._inflight = task
        return task

    async def refresh(self) -> HistoryState:
        """Load (initial mount or pull-to-refresh) and wait until this request settles."""
        task = self.request_load()
        # A newer request may supersede this one; wait for whichever load is current
        while True:
            await asyncio.wait({task})
            current = self._inflight
            if current is None or current.done():
                return self._state
            task = current

    def set_filter(self, selection: FilterSelection) -> None:
        """Re-publish the loaded items through a new filter. Never fetches."""
        if selection is self._state.filter:
            return
        self.logger.info("history_filter_changed", filter=selection.value)
        self._publish(filter=selection)

    def set_sort(self, selection: SortSelection) -> asyncio.Task[None]:
        """Apply the client comparator immediately, then re-fetch with server-side sort."""
        self.logger.info("history_sort_changed", sort=selection.value)
        self._sorted_items = sort_items(self._sorted_items, selection)
        self._publish(sort=selection)
        return self.request_load()

    async def aclose(self) -> None:
        """Cancel any in-flight load."""
        task, self._inflight = self._inflight, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})

    async def _load(self, generation: int, sort: SortSelection) -> None:
        params = parameters_for(sort)
        try:
            result = await self.source.fetch_submissions(
                sort_by=params.field_name,
                sort_order=params.direction.value,
                aggregate=self.aggregate,
            )
        except Exception as e:
            self.logger.exception("unexpected_history_fetch_error", error=str(e))
            result = Result.err(HistoryFetchError())

        if generation != self._generation:
            self.logger.info(
                "stale_history_response_ignored",
                generation=generation,
                current_generation=self._generation,
            )
            return

        if result.is_ok():
            self._apply_success(result.unwrap(), sort)
        else:
            self._apply_failure(result.unwrap_err(), sort)

    def _apply_success(self, submissions: list[Submission], sort: SortSelection) -> None:
        # First occurrence in server order wins
        submissions = self._drop_duplicates(submissions)
        inversion = first_inversion(submissions, sort)
        if inversion is not None:
            self.logger.warning(
                "server_order_rejected",
                sort=sort.value,
                inversion_index=inversion,
                count=len(submissions),
            )
            submissions = sort_submissions(submissions, sort)

        self._sorted_items = [HistoryItem.from_submission(s) for s in submissions]
        self._publish(
            phase=ReconcilePhase.LOADED,
            is_loading=False,
            error_message=None,
            used_fallback=False,
        )
        self.logger.info(
            "history_load_completed",
            count=len(self._sorted_items),
            server_order_trusted=inversion is None,
        )

    def _apply_failure(self, error: HistoryFetchError, sort: SortSelection) -> None:
        if self.config.fallback_enabled:
            fallback = sort_submissions(self._drop_duplicates(self.fallback_factory()), sort)
            self._sorted_items = [HistoryItem.from_submission(s) for s in fallback]
        else:
            self._sorted_items = []

        self._publish(
            phase=ReconcilePhase.FAILED,
            is_loading=False,
            error_message=error.user_message,
            used_fallback=self.config.fallback_enabled,
        )
        self.logger.warning(
            "history_load_failed",
            error=str(error),
            error_type=type(error).__name__,
            fallback_count=len(self._sorted_items),
        )

    def _drop_duplicates(self, submissions: Iterable[Submission]) -> list[Submission]:
        unique: list[Submission] = []
        seen: set[int] = set()
        for submission in submissions:
            if submission.id in seen:
                self.logger.warning("duplicate_submission_dropped", submission_id=submission.id)
                continue
            seen.add(submission.id)
            unique.append(submission)
        return unique

    def _publish(self, **changes: Any) -> None:
        selection = changes.get("filter", self._state.filter)
        changes["items"] = tuple(filter_items(self._sorted_items, selection))
        self._state = self._state.model_copy(update=changes)

        for observer in list(self._observers):
            try:
                observer(self._state)
            except Exception as e:
                self.logger.exception("history_observer_failed", error=str(e))
