"""Authentication gate in front of the scheduler."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from cleansys.core.catalog import EntryRef
from cleansys.core.privileges import is_root, sudo_cached, verify_password
from cleansys.errors import PrivilegeError

log = logging.getLogger(__name__)

Verifier = Callable[[str], bool]

WRONG_PASSWORD = "Incorrect password. Please try again."


class GateState(Enum):
    IDLE = "idle"
    AWAITING_CREDENTIAL = "awaiting_credential"
    AUTHENTICATED = "authenticated"
    CANCELLED = "cancelled"


class PrivilegeGate:
    """Decides whether a run request needs authentication and parks it if so.

    The gate never checks credentials itself; it hands the secret to
    *verifier* once and clears its input buffer right after, whatever
    the outcome.  ``AUTHENTICATED`` is sticky for the lifetime of the
    gate, mirroring sudo's credential cache.  ``CANCELLED`` is only ever
    observed as :attr:`last_outcome`; a cancelled gate settles back in
    ``IDLE``.
    """

    def __init__(
        self,
        verifier: Verifier = verify_password,
        elevated: Callable[[], bool] = is_root,
        cached: Callable[[], bool] = sudo_cached,
    ) -> None:
        self._verifier = verifier
        self._elevated = elevated
        self._cached = cached
        self.state = GateState.IDLE
        self.last_outcome: GateState | None = None
        self.error_message: str | None = None
        self._queued: list[EntryRef] = []
        self._buffer: list[str] = []

    # -- Queries --

    @property
    def is_elevated(self) -> bool:
        """Running as root or authenticated earlier in this session."""
        return self.state is GateState.AUTHENTICATED or self._elevated()

    @property
    def awaiting_credential(self) -> bool:
        return self.state is GateState.AWAITING_CREDENTIAL

    @property
    def queued(self) -> list[EntryRef]:
        return list(self._queued)

    @property
    def masked(self) -> str:
        """Bullet per typed character, for display."""
        return "•" * len(self._buffer)

    # -- Transitions --

    def request(self, refs: list[EntryRef], needs_elevation: bool) -> list[EntryRef] | None:
        """Release *refs* for dispatch, or park them until authentication.

        Returns the released entries, or None when they were queued.
        A request made while already awaiting credentials replaces the
        queue.
        """
        if not needs_elevation or self.is_elevated:
            return list(refs)

        if self._cached():
            log.info("Reusing cached sudo credentials")
            self.state = GateState.AUTHENTICATED
            self.last_outcome = GateState.AUTHENTICATED
            return list(refs)

        self.state = GateState.AWAITING_CREDENTIAL
        self._queued = list(refs)
        self._buffer.clear()
        self.error_message = None
        log.info("Authentication required for %d queued cleaners", len(self._queued))
        return None

    def add_char(self, char: str) -> None:
        if self.awaiting_credential:
            self._buffer.append(char)

    def remove_char(self) -> None:
        if self._buffer:
            self._buffer.pop()

    def submit(self, secret: str | None = None) -> list[EntryRef] | None:
        """Verify the typed (or given) secret.

        Returns the released queue on success; None when verification
        failed and the gate keeps waiting with the queue intact.
        """
        if not self.awaiting_credential:
            return None

        candidate = "".join(self._buffer) if secret is None else secret
        self._buffer.clear()
        try:
            ok = self._verifier(candidate)
        except PrivilegeError as exc:
            log.warning("Credential verification failed: %s", exc)
            self.error_message = str(exc)
            return None
        finally:
            del candidate

        if not ok:
            self.error_message = WRONG_PASSWORD
            return None

        released = self._queued
        self._queued = []
        self.error_message = None
        self.state = GateState.AUTHENTICATED
        self.last_outcome = GateState.AUTHENTICATED
        log.info("Authenticated; releasing %d cleaners", len(released))
        return released

    def cancel(self) -> list[EntryRef]:
        """Abandon authentication and return the discarded queue."""
        if not self.awaiting_credential:
            return []
        discarded = self._queued
        self._queued = []
        self._buffer.clear()
        self.error_message = None
        self.last_outcome = GateState.CANCELLED
        self.state = GateState.IDLE
        log.info("Authentication cancelled; discarded %d queued cleaners", len(discarded))
        return discarded
