"""Exception hierarchy shared by the cleansys core."""

from __future__ import annotations


class CleansysError(Exception):
    """Base class for all cleansys errors."""


class SelectionError(CleansysError):
    """Raised when a run is requested with nothing selected."""


class PrivilegeError(CleansysError):
    """Raised when privilege escalation or credential verification fails."""


class ElevationRequired(PrivilegeError):
    """Raised when a root-only cleaner is executed without an elevated context.

    The scheduler raises this *before* the cleaner is invoked so the caller
    can route the user back to authentication instead of running it blind.
    """

    def __init__(self, cleaner_name: str) -> None:
        super().__init__(f"{cleaner_name} requires elevated privileges")
        self.cleaner_name = cleaner_name


class CleanerError(CleansysError):
    """Raised by a cleaner when its cleanup operation fails."""
