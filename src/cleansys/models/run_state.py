"""Per-entry run state and status variants."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

_SPINNER = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")


class StatusKind(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class RunStatus:
    """Tagged status of one catalog entry during a run.

    Use the constructors (:meth:`pending`, :meth:`running`,
    :meth:`success`, :meth:`error`) rather than building instances by
    hand; ``message`` is only meaningful for the terminal kinds.
    """

    kind: StatusKind
    message: str = ""

    @classmethod
    def pending(cls) -> RunStatus:
        return cls(StatusKind.PENDING)

    @classmethod
    def running(cls) -> RunStatus:
        return cls(StatusKind.RUNNING)

    @classmethod
    def success(cls, message: str) -> RunStatus:
        return cls(StatusKind.SUCCESS, message)

    @classmethod
    def error(cls, message: str) -> RunStatus:
        return cls(StatusKind.ERROR, message)

    @property
    def is_active(self) -> bool:
        """Pending or Running."""
        return self.kind in (StatusKind.PENDING, StatusKind.RUNNING)

    @property
    def is_terminal(self) -> bool:
        return self.kind in (StatusKind.SUCCESS, StatusKind.ERROR)

    def symbol(self, frame: int = 0) -> str:
        """Single-character indicator; Running animates through *frame*."""
        match self.kind:
            case StatusKind.RUNNING:
                return _SPINNER[frame % len(_SPINNER)]
            case StatusKind.SUCCESS:
                return "✓"
            case StatusKind.ERROR:
                return "✗"
            case _:
                return "•"


@dataclass(slots=True)
class RunState:
    """Mutable state tracked in parallel to each catalog entry."""

    selected: bool = False
    status: RunStatus | None = None
    bytes_freed: int = 0

    def is_kind(self, kind: StatusKind) -> bool:
        return self.status is not None and self.status.kind is kind
