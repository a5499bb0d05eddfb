"""Tests for the time-paced execution scheduler."""

from __future__ import annotations

import pytest

from cleansys.core.catalog import EntryRef
from cleansys.core.executor import CapturingExecutor, ExecutionOutcome, Executor, SimulatedExecutor
from cleansys.core.results import ResultStore
from cleansys.core.scheduler import (
    CANCELLED_ERROR,
    CANCELLED_MESSAGE,
    ELEVATION_ERROR,
    ELEVATION_HINT,
    ExecutionScheduler,
    PacingConfig,
    failure_reason,
)
from cleansys.core.selection import SelectionModel
from cleansys.errors import SelectionError
from cleansys.models.run_state import RunStatus, StatusKind
from cleansys.settings import Settings

BROWSER, THUMBS, BROKEN = EntryRef(0, 0), EntryRef(0, 1), EntryRef(0, 2)
JOURNAL, CRASH = EntryRef(1, 0), EntryRef(1, 1)


@pytest.fixture
def make_scheduler(catalog, clock):
    def make(executor: Executor | None = None, elevated: bool = False, config: PacingConfig | None = None):
        selection = SelectionModel(catalog)
        return ExecutionScheduler(
            selection,
            executor or CapturingExecutor(),
            ResultStore(),
            config=config,
            clock=clock,
            is_elevated=lambda: elevated,
        )

    return make


def _select(scheduler: ExecutionScheduler, *refs: EntryRef) -> list[EntryRef]:
    for ref in refs:
        scheduler.selection.toggle(*ref)
    return scheduler.selection.selected_refs()


def _run_to_completion(scheduler: ExecutionScheduler, clock, step: float = 0.5, limit: int = 200) -> None:
    for _ in range(limit):
        if not scheduler.is_running:
            return
        clock.advance(step)
        scheduler.tick()
    raise AssertionError("run did not finish")


def _status(scheduler: ExecutionScheduler, ref: EntryRef) -> RunStatus | None:
    return scheduler.selection.state(ref).status


def _completion_messages(scheduler: ExecutionScheduler) -> list[str]:
    return [m for m in scheduler.messages if m.startswith("✅ Cleaning completed!")]


class TestPacing:
    def test_dispatch_marks_pending(self, make_scheduler):
        scheduler = make_scheduler()
        refs = _select(scheduler, BROWSER, THUMBS)

        assert scheduler.dispatch(refs) is True
        assert scheduler.is_running
        assert _status(scheduler, BROWSER) == RunStatus.pending()
        assert _status(scheduler, THUMBS) == RunStatus.pending()
        assert _status(scheduler, BROKEN) is None

    def test_dispatch_requires_entries(self, make_scheduler):
        with pytest.raises(SelectionError):
            make_scheduler().dispatch([])

    def test_promotion_and_execution_timeline(self, make_scheduler, clock):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, BROWSER, THUMBS))

        scheduler.tick()
        assert _status(scheduler, BROWSER).kind is StatusKind.PENDING

        clock.advance(1.5)
        scheduler.tick()
        assert _status(scheduler, BROWSER).kind is StatusKind.RUNNING
        assert _status(scheduler, THUMBS).kind is StatusKind.PENDING

        clock.advance(1.5)
        scheduler.tick()
        assert _status(scheduler, BROWSER).kind is StatusKind.RUNNING
        assert _status(scheduler, THUMBS).kind is StatusKind.RUNNING

        clock.advance(0.5)
        scheduler.tick()
        assert _status(scheduler, BROWSER) == RunStatus.success("Cleaned Browser (2.00 KB)")
        assert _status(scheduler, THUMBS).kind is StatusKind.RUNNING

        clock.advance(1.5)
        scheduler.tick()
        assert _status(scheduler, THUMBS) == RunStatus.success("Cleaned Thumbs (4.00 KB)")
        assert not scheduler.is_running
        assert scheduler.total_bytes == 2048 + 4096

    def test_only_one_promotion_per_interval(self, make_scheduler, clock):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, BROWSER, THUMBS))

        clock.advance(1.6)
        scheduler.tick()
        scheduler.tick()
        running = scheduler.selection.count(StatusKind.RUNNING)
        assert running == 1

    def test_zero_intervals_finish_quickly(self, make_scheduler, clock):
        scheduler = make_scheduler(config=PacingConfig(start_interval=0, run_duration=0))
        scheduler.dispatch(_select(scheduler, BROWSER, THUMBS))

        scheduler.tick()
        scheduler.tick()
        assert not scheduler.is_running
        assert scheduler.selection.count(StatusKind.SUCCESS) == 2

    def test_dispatch_while_running_ignored(self, make_scheduler):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, BROWSER))
        assert scheduler.dispatch([THUMBS]) is False
        assert scheduler.dispatched == [BROWSER]
        assert _status(scheduler, THUMBS) is None


class TestOutcomes:
    def test_success_feeds_result_store(self, make_scheduler, clock):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, BROWSER, THUMBS))
        _run_to_completion(scheduler, clock)

        paths = sorted(i.path for i in scheduler.results)
        assert paths == ["/home/u/.cache/b/x", "Thumbs (cleaned files)"]
        assert {i.category for i in scheduler.results} == {"User Cleaners"}
        assert scheduler.selection.state(BROWSER).bytes_freed == 2048

    def test_failure_reason_is_last_segment(self, make_scheduler, clock):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, BROKEN, THUMBS))
        _run_to_completion(scheduler, clock)

        assert _status(scheduler, BROKEN) == RunStatus.error("Failed: Permission denied")
        assert _status(scheduler, THUMBS).kind is StatusKind.SUCCESS
        assert scheduler.total_bytes == 4096

    def test_root_entry_fails_fast_without_elevation(self, make_scheduler, clock):
        calls = []

        class SpyExecutor(Executor):
            def run(self, cleaner, skip_confirmation=True):
                calls.append(cleaner.name)
                return ExecutionOutcome(bytes_freed=1)

        scheduler = make_scheduler(executor=SpyExecutor())
        scheduler.dispatch(_select(scheduler, JOURNAL, CRASH))
        _run_to_completion(scheduler, clock)

        assert calls == []
        assert _status(scheduler, JOURNAL) == RunStatus.error(ELEVATION_ERROR)
        assert _status(scheduler, CRASH) == RunStatus.error(ELEVATION_ERROR)
        assert scheduler.messages.count(ELEVATION_HINT) == 1

    def test_root_entry_runs_when_elevated(self, make_scheduler, clock):
        scheduler = make_scheduler(elevated=True)
        scheduler.dispatch(_select(scheduler, JOURNAL))
        _run_to_completion(scheduler, clock)

        assert _status(scheduler, JOURNAL) == RunStatus.success("Cleaned Journal (root) (1.00 MB)")
        assert ELEVATION_HINT not in scheduler.messages

    def test_hint_not_repeated_across_runs(self, make_scheduler, clock):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, JOURNAL))
        _run_to_completion(scheduler, clock)
        scheduler.dispatch([CRASH])
        _run_to_completion(scheduler, clock)

        assert scheduler.messages.count(ELEVATION_HINT) == 1

    def test_result_discarded_when_status_changes_during_execution(self, make_scheduler, clock):
        class InterferingExecutor(Executor):
            def __init__(self):
                self.scheduler = None

            def run(self, cleaner, skip_confirmation=True):
                self.scheduler.selection.state(BROWSER).status = RunStatus.error("changed")
                return ExecutionOutcome(bytes_freed=999, output="Removed /tmp/x (1 KB)")

        executor = InterferingExecutor()
        scheduler = make_scheduler(executor=executor)
        executor.scheduler = scheduler
        scheduler.dispatch(_select(scheduler, BROWSER))
        _run_to_completion(scheduler, clock)

        assert _status(scheduler, BROWSER) == RunStatus.error("changed")
        assert scheduler.total_bytes == 0
        assert len(scheduler.results) == 0

    def test_clean_results_and_log(self, make_scheduler, clock):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, BROWSER, BROKEN))
        _run_to_completion(scheduler, clock)

        by_id = {r.cleaner_id: r for r in scheduler.clean_results}
        assert by_id["browser"].freed_bytes == 2048
        assert by_id["broken"].error == "Failed: Permission denied"
        assert "Executing: Browser" in scheduler.log_lines
        assert "Removed /home/u/.cache/b/x (2.00 KB)" in scheduler.log_lines

    def test_simulated_executor(self, make_scheduler, clock):
        scheduler = make_scheduler(executor=SimulatedExecutor())
        scheduler.dispatch(_select(scheduler, BROKEN))
        _run_to_completion(scheduler, clock)

        assert _status(scheduler, BROKEN) == RunStatus.success("Cleaned Broken (2.00 MB)")
        assert [i.path for i in scheduler.results] == ["Broken (cleaned files)"]


class TestCompletion:
    def test_completion_message_once(self, make_scheduler, clock):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, THUMBS))
        _run_to_completion(scheduler, clock)

        for _ in range(5):
            clock.advance(1)
            scheduler.tick()

        assert _completion_messages(scheduler) == [
            "✅ Cleaning completed! Total space freed: 4.00 KB (Press ESC to return to main menu)"
        ]
        assert scheduler.is_finished

    def test_completion_with_only_errors(self, make_scheduler, clock):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, BROKEN))
        _run_to_completion(scheduler, clock)
        assert len(_completion_messages(scheduler)) == 1

    def test_elapsed_time(self, make_scheduler, clock):
        scheduler = make_scheduler()
        assert scheduler.elapsed_time() == "0s"
        scheduler.dispatch(_select(scheduler, THUMBS))
        _run_to_completion(scheduler, clock)
        assert scheduler.elapsed_time() == "3s"

        clock.advance(100)
        assert scheduler.elapsed_time() == "3s"


class TestCancel:
    def test_cancel_marks_active_entries(self, make_scheduler, clock):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, BROWSER, THUMBS))
        clock.advance(1.5)
        scheduler.tick()

        assert scheduler.cancel() == 2
        for ref in (BROWSER, THUMBS):
            assert _status(scheduler, ref) == RunStatus.error(CANCELLED_ERROR)
            assert not scheduler.selection.state(ref).selected
        assert not scheduler.is_running
        assert scheduler.messages[-1] == CANCELLED_MESSAGE
        assert _completion_messages(scheduler) == []

    def test_cancel_keeps_finished_entries(self, make_scheduler, clock):
        scheduler = make_scheduler(config=PacingConfig(start_interval=1, run_duration=1))
        scheduler.dispatch(_select(scheduler, BROWSER, THUMBS))
        clock.advance(1)
        scheduler.tick()
        clock.advance(1)
        scheduler.tick()

        scheduler.cancel()
        assert _status(scheduler, BROWSER).kind is StatusKind.SUCCESS
        assert scheduler.selection.state(BROWSER).selected
        assert _status(scheduler, THUMBS) == RunStatus.error(CANCELLED_ERROR)

    def test_cancel_when_idle(self, make_scheduler):
        scheduler = make_scheduler()
        assert scheduler.cancel() == 0
        assert scheduler.messages == []


class TestPause:
    def test_paused_time_excluded(self, make_scheduler, clock):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, BROWSER))
        clock.advance(1.0)
        scheduler.pause()
        assert scheduler.is_paused

        clock.advance(30)
        scheduler.tick()
        assert _status(scheduler, BROWSER).kind is StatusKind.PENDING
        assert scheduler.elapsed() == pytest.approx(1.0)

        scheduler.resume()
        clock.advance(0.5)
        scheduler.tick()
        assert _status(scheduler, BROWSER).kind is StatusKind.RUNNING

    def test_toggle_pause(self, make_scheduler):
        scheduler = make_scheduler()
        scheduler.dispatch(_select(scheduler, BROWSER))
        assert scheduler.toggle_pause() is True
        assert scheduler.toggle_pause() is False

    def test_pause_ignored_when_idle(self, make_scheduler):
        scheduler = make_scheduler()
        scheduler.pause()
        assert not scheduler.is_paused


class TestHelpers:
    def test_failure_reason(self):
        assert failure_reason(RuntimeError("a: b:  c ")) == "c"
        assert failure_reason(RuntimeError("plain")) == "plain"
        assert failure_reason(RuntimeError("trailing:")) == "RuntimeError"

    def test_pacing_from_settings(self, tmp_path):
        settings = Settings(tmp_path / "settings.json")
        settings.set("scheduler.start_interval", 0.25)
        config = PacingConfig.from_settings(settings)
        assert config == PacingConfig(start_interval=0.25, run_duration=2.0)
