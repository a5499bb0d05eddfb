"""One interactive cleanup session: selection, authentication, run and results."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from cleansys.core.catalog import Catalog, EntryRef
from cleansys.core.executor import Executor, build_executor
from cleansys.core.gate import PrivilegeGate
from cleansys.core.results import DEFAULT_CAPACITY, ResultStore, SortMode
from cleansys.core.scheduler import (
    ELEVATION_ERROR,
    NO_SELECTION,
    Clock,
    ExecutionScheduler,
    PacingConfig,
)
from cleansys.core.selection import SelectionModel
from cleansys.core.tracker import Tracker
from cleansys.models.reclaimed import ReclaimedItem
from cleansys.models.run_state import RunStatus, StatusKind

if TYPE_CHECKING:
    from cleansys.settings import Settings

log = logging.getLogger(__name__)

AUTH_REQUIRED = "Root permissions needed. Please enter your sudo password to continue."
AUTH_GRANTED = "Root permissions obtained. Proceeding with all cleaners."
AUTH_CANCELLED = "Authentication cancelled. System cleaners will be skipped."


class CleanupSession:
    """Wires the catalog, selection, gate, scheduler and result store together.

    This is the surface a front end drives: it forwards key-level actions
    to the right component and turns the outcome into user-facing
    messages.  When a tracker is given, per-cleaner outcomes are
    persisted once each run finishes.
    """

    def __init__(
        self,
        catalog: Catalog,
        executor: Executor | None = None,
        gate: PrivilegeGate | None = None,
        config: PacingConfig | None = None,
        capacity: int = DEFAULT_CAPACITY,
        clock: Clock = time.monotonic,
        tracker: Tracker | None = None,
    ) -> None:
        self.catalog = catalog
        self.selection = SelectionModel(catalog)
        self.gate = gate or PrivilegeGate()
        if capacity > DEFAULT_CAPACITY:
            log.warning("Result capacity %d exceeds the limit, using %d", capacity, DEFAULT_CAPACITY)
            capacity = DEFAULT_CAPACITY
        self.results = ResultStore(capacity)
        self.scheduler = ExecutionScheduler(
            self.selection,
            executor or build_executor("real"),
            self.results,
            config=config,
            clock=clock,
            is_elevated=lambda: self.gate.is_elevated,
        )
        self.tracker = tracker

        self.search_active = False
        self.search_query = ""
        self.category_filter = ""
        self.sort_mode = SortMode.CATEGORY
        self._recorded = True

    @classmethod
    def from_settings(
        cls,
        catalog: Catalog,
        settings: Settings,
        simulate: bool = False,
        **kwargs,
    ) -> CleanupSession:
        """Build a session configured from *settings*; *simulate* overrides the executor mode."""
        mode = "simulated" if simulate else settings.get("scheduler.executor")
        tracker = Tracker() if settings.get("history.enabled") else None
        return cls(
            catalog,
            executor=build_executor(mode),
            config=PacingConfig.from_settings(settings),
            capacity=int(settings.get("results.capacity")),
            tracker=tracker,
            **kwargs,
        )

    # -- Run lifecycle --

    @property
    def messages(self) -> list[str]:
        return self.scheduler.messages

    @property
    def is_running(self) -> bool:
        return self.scheduler.is_running

    @property
    def awaiting_credential(self) -> bool:
        return self.gate.awaiting_credential

    def run_selected(self) -> bool:
        """Request a run of the current selection.

        Returns True when the run was dispatched, False when nothing was
        selected, a run is already active, or authentication is pending.
        """
        if self.scheduler.is_running:
            return False
        if not self.selection.has_any_selected():
            self.scheduler.notify(NO_SELECTION)
            return False

        refs = self.selection.selected_refs()
        released = self.gate.request(refs, self.selection.requires_elevation(self.gate.is_elevated))
        if released is None:
            self.scheduler.notify(AUTH_REQUIRED)
            return False
        return self._dispatch(released)

    def submit_credential(self, secret: str | None = None) -> bool:
        """Verify the typed password and start the queued run on success."""
        released = self.gate.submit(secret)
        if released is None:
            return False
        self.scheduler.notify(AUTH_GRANTED)
        return self._dispatch(released)

    def cancel_credential(self) -> int:
        """Abandon authentication; root-only entries in the queue are failed.

        Returns the number of entries marked as failed.
        """
        failed = 0
        for ref in self.gate.cancel():
            if not self.catalog.entry(ref).requires_root:
                continue
            state = self.selection.state(ref)
            state.status = RunStatus.error(ELEVATION_ERROR)
            state.selected = False
            failed += 1
        if failed:
            self.scheduler.notify(AUTH_CANCELLED)
            self.scheduler.show_elevation_hint()
        return failed

    def tick(self) -> None:
        self.scheduler.tick()
        self._record_if_finished()

    def cancel_run(self) -> int:
        cancelled = self.scheduler.cancel()
        self._record_if_finished()
        return cancelled

    def toggle_pause(self) -> bool:
        return self.scheduler.toggle_pause()

    def clear_errors(self) -> int:
        return self.selection.clear_errors()

    def elapsed_time(self) -> str:
        return self.scheduler.elapsed_time()

    def _dispatch(self, refs: list[EntryRef]) -> bool:
        dispatched = self.scheduler.dispatch(refs)
        if dispatched:
            self._recorded = False
        return dispatched

    def _record_if_finished(self) -> None:
        if self._recorded or self.scheduler.is_running:
            return
        self._recorded = True
        if self.tracker is None:
            return
        self.tracker.record(list(self.scheduler.clean_results))
        self.tracker.save_session()

    # -- Counters --

    @property
    def selected_count(self) -> int:
        return self.selection.selected_count

    @property
    def error_count(self) -> int:
        return self.selection.error_count

    @property
    def operation_count(self) -> int:
        return self.selection.operation_count

    @property
    def completed_count(self) -> int:
        return self.selection.count(StatusKind.SUCCESS)

    @property
    def total_bytes(self) -> int:
        return self.scheduler.total_bytes

    # -- Result view --

    def toggle_search(self) -> None:
        self.search_active = not self.search_active
        if not self.search_active:
            self.search_query = ""

    def add_search_char(self, char: str) -> None:
        if self.search_active:
            self.search_query += char

    def remove_search_char(self) -> None:
        if self.search_active:
            self.search_query = self.search_query[:-1]

    def clear_search(self) -> None:
        self.search_active = False
        self.search_query = ""
        self.category_filter = ""

    def cycle_sort(self) -> SortMode:
        self.sort_mode = self.sort_mode.next()
        return self.sort_mode

    def get_filtered_items(self, search: str | None = None, category_filter: str | None = None) -> list[ReclaimedItem]:
        """Query the result store; arguments default to the session's view state."""
        return self.results.query(
            self.search_query if search is None else search,
            self.category_filter if category_filter is None else category_filter,
            self.sort_mode,
        )

    def category_totals(self) -> dict[str, tuple[int, int]]:
        return self.results.category_totals()
