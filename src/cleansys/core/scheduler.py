"""Time-paced execution of dispatched cleaners."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

from cleansys.core.catalog import EntryRef
from cleansys.core.executor import Executor
from cleansys.core.extractor import MARKERS, extract_items
from cleansys.core.results import ResultStore
from cleansys.core.selection import SelectionModel
from cleansys.errors import ElevationRequired, PrivilegeError, SelectionError
from cleansys.models.clean_result import CleanResult
from cleansys.models.run_state import RunStatus, StatusKind
from cleansys.utils import format_elapsed, format_size

if TYPE_CHECKING:
    from cleansys.settings import Settings

log = logging.getLogger(__name__)

Clock = Callable[[], float]

ELEVATION_ERROR = "requires elevated privileges"
ELEVATION_HINT = "💡 System cleaners require root privileges. Run 'sudo cleansys' or authenticate when prompted."
CANCELLED_ERROR = "Operation cancelled by user"
CANCELLED_MESSAGE = "Cleaning operations cancelled by user."
NO_SELECTION = "No items selected. Please select items to clean."


@dataclass(frozen=True, slots=True)
class PacingConfig:
    """Seconds between promotions and minimum time an entry shows as running."""

    start_interval: float = 1.5
    run_duration: float = 2.0

    @classmethod
    def from_settings(cls, settings: Settings) -> PacingConfig:
        return cls(
            start_interval=float(settings.get("scheduler.start_interval")),
            run_duration=float(settings.get("scheduler.run_duration")),
        )


def failure_reason(exc: BaseException) -> str:
    """Last ``:``-separated segment of the exception text, trimmed."""
    reason = str(exc).rsplit(":", 1)[-1].strip()
    return reason or type(exc).__name__


class ExecutionScheduler:
    """Drives dispatched entries through Pending -> Running -> Success/Error.

    Nothing happens between calls to :meth:`tick`; the caller decides
    how often to tick.  One entry is promoted to Running per
    ``start_interval`` of active time, and a Running entry is executed
    once it has been running for ``run_duration``.  Execution blocks the
    tick.

    ``messages`` holds user-facing notices (hint, completion, cancel);
    ``log_lines`` is the operation log shown in the detail view.
    """

    def __init__(
        self,
        selection: SelectionModel,
        executor: Executor,
        results: ResultStore,
        config: PacingConfig | None = None,
        clock: Clock = time.monotonic,
        is_elevated: Callable[[], bool] = lambda: False,
    ) -> None:
        self.selection = selection
        self.executor = executor
        self.results = results
        self.config = config or PacingConfig()
        self._clock = clock
        self._is_elevated = is_elevated

        self.messages: list[str] = []
        self.log_lines: list[str] = []
        self.clean_results: list[CleanResult] = []
        self.total_bytes = 0

        self._dispatched: list[EntryRef] = []
        self._promoted = 0
        self._running_since: dict[EntryRef, float] = {}
        self._started_at: float | None = None
        self._finished_at: float | None = None
        self._paused_at: float | None = None
        self._paused_total = 0.0
        self._running = False
        self._hint_shown = False
        self._completion_shown = False

    # -- Queries --

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._paused_at is not None

    @property
    def is_finished(self) -> bool:
        """A run was dispatched and has since completed or been cancelled."""
        return not self._running and self._started_at is not None

    @property
    def dispatched(self) -> list[EntryRef]:
        return list(self._dispatched)

    def elapsed(self) -> float:
        """Active seconds since dispatch, excluding paused time."""
        if self._started_at is None:
            return 0.0
        now = self._finished_at if self._finished_at is not None else self._clock()
        paused = self._paused_total
        if self._paused_at is not None:
            paused += now - self._paused_at
        return max(0.0, now - self._started_at - paused)

    def elapsed_time(self) -> str:
        """Wall time of the current or last run, e.g. ``"1m 5s"``."""
        if self._started_at is None:
            return format_elapsed(0)
        end = self._finished_at if self._finished_at is not None else self._clock()
        return format_elapsed(end - self._started_at)

    # -- Lifecycle --

    def notify(self, message: str) -> None:
        self.messages.append(message)

    def show_elevation_hint(self) -> None:
        """Append the elevation hint once per scheduler lifetime."""
        if not self._hint_shown:
            self._hint_shown = True
            self.notify(ELEVATION_HINT)

    def dispatch(self, refs: list[EntryRef]) -> bool:
        """Start a run over *refs*; returns False if a run is already active."""
        if self._running:
            log.info("Run already active, ignoring dispatch of %d entries", len(refs))
            return False
        if not refs:
            raise SelectionError(NO_SELECTION)

        for ref in refs:
            state = self.selection.state(ref)
            state.status = RunStatus.pending()
            state.bytes_freed = 0

        self._dispatched = list(refs)
        self._promoted = 0
        self._running_since.clear()
        self.total_bytes = 0
        self.clean_results.clear()
        self.log_lines.clear()
        self.results.clear()
        self._completion_shown = False
        self._paused_at = None
        self._paused_total = 0.0
        self._started_at = self._clock()
        self._finished_at = None
        self._running = True
        log.info("Dispatched %d cleaners", len(refs))
        return True

    def tick(self) -> None:
        """Advance pacing: promote, execute due entries, detect completion."""
        if not self._running or self.is_paused:
            return

        elapsed = self.elapsed()
        if self._start_count(elapsed) > self._promoted and self._promote(elapsed):
            self._promoted += 1

        for ref in self._due(elapsed):
            self._execute(ref)

        self._check_completion()

    def pause(self) -> None:
        if self._running and self._paused_at is None:
            self._paused_at = self._clock()
            log.debug("Run paused")

    def resume(self) -> None:
        if self._paused_at is not None:
            self._paused_total += self._clock() - self._paused_at
            self._paused_at = None
            log.debug("Run resumed")

    def toggle_pause(self) -> bool:
        """Pause or resume; returns True when now paused."""
        if self.is_paused:
            self.resume()
        else:
            self.pause()
        return self.is_paused

    def cancel(self) -> int:
        """Abort the run; returns the number of entries cancelled."""
        if not self._running:
            return 0
        cancelled = 0
        for ref in self._dispatched:
            state = self.selection.state(ref)
            if state.status is not None and state.status.is_active:
                state.status = RunStatus.error(CANCELLED_ERROR)
                state.selected = False
                self.clean_results.append(CleanResult(self._entry_id(ref), error=CANCELLED_ERROR))
                cancelled += 1
        self.resume()
        self._finish(announce=False)
        self.notify(CANCELLED_MESSAGE)
        log.info("Run cancelled, %d cleaners aborted", cancelled)
        return cancelled

    # -- Internals --

    def _start_count(self, elapsed: float) -> int:
        # A zero interval starts everything on the first tick
        if self.config.start_interval <= 0:
            return len(self._dispatched)
        return int(elapsed / self.config.start_interval)

    def _promote(self, elapsed: float) -> bool:
        for ref in self._dispatched:
            state = self.selection.state(ref)
            if state.is_kind(StatusKind.PENDING):
                state.status = RunStatus.running()
                self._running_since[ref] = elapsed
                log.debug("Started %s", self.selection.catalog.entry(ref).name)
                return True
        return False

    def _due(self, elapsed: float) -> list[EntryRef]:
        return [
            ref
            for ref in self._dispatched
            if self.selection.state(ref).is_kind(StatusKind.RUNNING)
            and elapsed - self._running_since.get(ref, elapsed) >= self.config.run_duration
        ]

    def _execute(self, ref: EntryRef) -> None:
        cleaner = self.selection.catalog.entry(ref)
        category = self.selection.catalog.category_of(ref)
        state = self.selection.state(ref)
        status_before = state.status

        try:
            if cleaner.requires_root and not self._is_elevated():
                raise ElevationRequired(cleaner.name)
            self.log_lines.append(f"Executing: {cleaner.name}")
            outcome = self.executor.run(cleaner, skip_confirmation=True)
        except PrivilegeError as exc:
            log.warning("Cleaner '%s' needs elevation: %s", cleaner.id, exc)
            self._fail(ref, ELEVATION_ERROR, status_before)
            self.show_elevation_hint()
            return
        except Exception as exc:
            log.exception("Cleaner '%s' failed", cleaner.id)
            self._fail(ref, f"Failed: {failure_reason(exc)}", status_before)
            return

        if state.status != status_before:
            log.info("Discarding result of %s, status changed during execution", cleaner.name)
            return

        freed = max(0, outcome.bytes_freed)
        marker = " (root)" if cleaner.requires_root else ""
        state.status = RunStatus.success(f"Cleaned {cleaner.name}{marker} ({format_size(freed)})")
        state.bytes_freed = freed
        self.total_bytes += freed
        self.clean_results.append(CleanResult(cleaner.id, freed_bytes=freed))
        self.log_lines.append(f"Completed {cleaner.name}: {format_size(freed)} freed")
        self.log_lines.extend(
            line.strip() for line in outcome.output.splitlines() if any(m in line for m in MARKERS)
        )

        try:
            items = extract_items(
                outcome.output,
                freed,
                category=category.name,
                cleaner_name=cleaner.name,
                now=datetime.now(timezone.utc),
            )
        except Exception:
            log.exception("Could not extract reclaimed items from %s", cleaner.name)
            items = []
        self.results.extend(items)

    def _fail(self, ref: EntryRef, message: str, status_before: RunStatus | None) -> None:
        state = self.selection.state(ref)
        name = self.selection.catalog.entry(ref).name
        if state.status != status_before:
            return
        state.status = RunStatus.error(message)
        self.clean_results.append(CleanResult(self._entry_id(ref), error=message))
        self.log_lines.append(f"Failed {name}: {message}")

    def _check_completion(self) -> None:
        active = any(
            self.selection.state(ref).status is not None and self.selection.state(ref).status.is_active
            for ref in self._dispatched
        )
        if self._dispatched and not active:
            self._finish()

    def _finish(self, announce: bool = True) -> None:
        self._running = False
        self._finished_at = self._clock()
        self._running_since.clear()
        if announce and not self._completion_shown:
            self._completion_shown = True
            self.notify(
                f"✅ Cleaning completed! Total space freed: {format_size(self.total_bytes)} "
                "(Press ESC to return to main menu)"
            )
            log.info("Run finished in %s, %d bytes freed", self.elapsed_time(), self.total_bytes)

    def _entry_id(self, ref: EntryRef) -> str:
        return self.selection.catalog.entry(ref).id
