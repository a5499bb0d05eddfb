"""Strategies for invoking a cleaner and capturing what it prints."""

from __future__ import annotations

import contextlib
import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from cleansys.models.cleaner import Cleaner
from cleansys.utils import format_size

log = logging.getLogger(__name__)

_MB = 1024 * 1024


@dataclass(slots=True)
class ExecutionOutcome:
    """Bytes a cleaner reported freeing plus everything it printed."""

    bytes_freed: int
    output: str = ""


class Executor(ABC):
    """Runs one cleaner synchronously."""

    name: str = ""

    @abstractmethod
    def run(self, cleaner: Cleaner, skip_confirmation: bool = True) -> ExecutionOutcome:
        """Execute *cleaner*; exceptions raised by it propagate unchanged."""


class CapturingExecutor(Executor):
    """Calls the cleaner for real with stdout and stderr captured.

    Text written through ``sys.stdout``/``sys.stderr`` (``print``,
    ``click.echo``) during the call is collected and returned.
    Cleaners spawn child processes with piped output, so nothing bypasses
    the capture at the descriptor level.
    """

    name = "real"

    def run(self, cleaner: Cleaner, skip_confirmation: bool = True) -> ExecutionOutcome:
        buffer = io.StringIO()
        log.debug("Executing cleaner '%s' with captured output", cleaner.id)
        with contextlib.redirect_stdout(buffer), contextlib.redirect_stderr(buffer):
            freed = cleaner.execute(skip_confirmation)
        return ExecutionOutcome(bytes_freed=int(freed), output=buffer.getvalue())


class SimulatedExecutor(Executor):
    """Deterministic stand-in that never touches the filesystem.

    The n-th simulated run frees ``(2 + n % 10)`` MiB and prints a single
    summary line, which yields one fallback record in the result view.
    """

    name = "simulated"

    def __init__(self) -> None:
        self._runs = 0

    def run(self, cleaner: Cleaner, skip_confirmation: bool = True) -> ExecutionOutcome:
        freed = _MB * (2 + self._runs % 10)
        self._runs += 1
        log.debug("Simulating cleaner '%s': %d bytes", cleaner.id, freed)
        return ExecutionOutcome(
            bytes_freed=freed,
            output=f"Cleaning: {format_size(freed)} freed (simulated)\n",
        )


_EXECUTORS: dict[str, type[Executor]] = {
    CapturingExecutor.name: CapturingExecutor,
    SimulatedExecutor.name: SimulatedExecutor,
}


def build_executor(mode: str) -> Executor:
    """Return the executor configured by *mode* ('real' or 'simulated')."""
    try:
        return _EXECUTORS[mode]()
    except KeyError:
        raise ValueError(f"Unknown executor mode '{mode}' (expected one of: {', '.join(sorted(_EXECUTORS))})")
