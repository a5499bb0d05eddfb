"""Tests for the privilege gate."""

from __future__ import annotations

import pytest

from cleansys.core.catalog import EntryRef
from cleansys.core.gate import WRONG_PASSWORD, GateState, PrivilegeGate
from cleansys.errors import PrivilegeError

REFS = [EntryRef(0, 0), EntryRef(1, 0)]


class RecordingVerifier:
    def __init__(self, accept: str = "hunter2", error: Exception | None = None):
        self.accept = accept
        self.error = error
        self.calls: list[str] = []

    def __call__(self, secret: str) -> bool:
        self.calls.append(secret)
        if self.error:
            raise self.error
        return secret == self.accept


@pytest.fixture
def verifier():
    return RecordingVerifier()


@pytest.fixture
def gate(verifier):
    return PrivilegeGate(verifier=verifier, elevated=lambda: False, cached=lambda: False)


def _type(gate: PrivilegeGate, text: str) -> None:
    for char in text:
        gate.add_char(char)


class TestRequest:
    def test_no_elevation_needed_releases(self, gate):
        assert gate.request(REFS, needs_elevation=False) == REFS
        assert gate.state is GateState.IDLE

    def test_elevation_needed_parks(self, gate):
        assert gate.request(REFS, needs_elevation=True) is None
        assert gate.state is GateState.AWAITING_CREDENTIAL
        assert gate.queued == REFS

    def test_already_root_releases(self, verifier):
        gate = PrivilegeGate(verifier=verifier, elevated=lambda: True, cached=lambda: False)
        assert gate.request(REFS, needs_elevation=True) == REFS
        assert verifier.calls == []

    def test_cached_sudo_counts_as_elevated(self, verifier):
        gate = PrivilegeGate(verifier=verifier, elevated=lambda: False, cached=lambda: True)
        assert gate.request(REFS, needs_elevation=True) == REFS
        assert gate.state is GateState.AUTHENTICATED
        assert verifier.calls == []


class TestBuffer:
    def test_masked(self, gate):
        gate.request(REFS, needs_elevation=True)
        _type(gate, "abc")
        assert gate.masked == "•••"
        gate.remove_char()
        assert gate.masked == "••"

    def test_typing_ignored_when_idle(self, gate):
        gate.add_char("x")
        assert gate.masked == ""

    def test_remove_on_empty_buffer(self, gate):
        gate.remove_char()
        assert gate.masked == ""


class TestSubmit:
    def test_success_releases_queue(self, gate, verifier):
        gate.request(REFS, needs_elevation=True)
        _type(gate, "hunter2")

        assert gate.submit() == REFS
        assert verifier.calls == ["hunter2"]
        assert gate.state is GateState.AUTHENTICATED
        assert gate.is_elevated
        assert gate.queued == []
        assert gate.masked == ""

    def test_authenticated_is_sticky(self, gate):
        gate.request(REFS, needs_elevation=True)
        gate.submit("hunter2")
        assert gate.request([EntryRef(1, 1)], needs_elevation=True) == [EntryRef(1, 1)]
        assert gate.state is GateState.AUTHENTICATED

    def test_wrong_password_keeps_queue(self, gate):
        gate.request(REFS, needs_elevation=True)
        _type(gate, "nope")

        assert gate.submit() is None
        assert gate.state is GateState.AWAITING_CREDENTIAL
        assert gate.queued == REFS
        assert gate.error_message == WRONG_PASSWORD
        assert gate.masked == ""

    def test_retry_after_failure(self, gate):
        gate.request(REFS, needs_elevation=True)
        gate.submit("nope")
        assert gate.submit("hunter2") == REFS
        assert gate.error_message is None

    def test_helper_failure_reported(self):
        verifier = RecordingVerifier(error=PrivilegeError("sudo is not available on this system"))
        gate = PrivilegeGate(verifier=verifier, elevated=lambda: False, cached=lambda: False)
        gate.request(REFS, needs_elevation=True)
        _type(gate, "secret")

        assert gate.submit() is None
        assert gate.error_message == "sudo is not available on this system"
        assert gate.awaiting_credential
        assert gate.masked == ""

    def test_submit_when_idle(self, gate, verifier):
        assert gate.submit("hunter2") is None
        assert verifier.calls == []


class TestCancel:
    def test_cancel_discards_queue(self, gate):
        gate.request(REFS, needs_elevation=True)
        _type(gate, "abc")

        assert gate.cancel() == REFS
        assert gate.state is GateState.IDLE
        assert gate.last_outcome is GateState.CANCELLED
        assert gate.queued == []
        assert gate.masked == ""

    def test_cancel_when_idle(self, gate):
        assert gate.cancel() == []
        assert gate.last_outcome is None
