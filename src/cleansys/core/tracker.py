"""Tracks freed space across sessions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from cleansys.models.clean_result import CleanResult
from cleansys.storage import load_history, save_history

log = logging.getLogger(__name__)

PERIODS = ("today", "week", "month", "all")


class Tracker:
    """Collects per-cleaner results for the current run and persists them."""

    def __init__(self) -> None:
        self._session_results: list[CleanResult] = []

    @property
    def session_bytes_freed(self) -> int:
        return sum(r.freed_bytes for r in self._session_results)

    @property
    def session_failures(self) -> int:
        return sum(1 for r in self._session_results if r.error)

    def record(self, results: list[CleanResult]) -> None:
        self._session_results.extend(results)

    def get_last_clean_time(self) -> str | None:
        """Return ISO timestamp of the most recent session, or None."""
        sessions = load_history().get("sessions", [])
        return sessions[-1]["timestamp"] if sessions else None

    def save_session(self) -> None:
        """Persist the current session to history and start a new one."""
        if not self._session_results:
            return

        history = load_history()
        entry = self._build_session_entry()
        history["sessions"].append(entry)
        save_history(history)

        log.info(
            "Saved session: %d bytes freed by %d cleaners",
            _session_bytes(entry),
            len({d["cleaner_id"] for d in entry["details"]}),
        )
        self._session_results.clear()

    def get_stats(self, period: str = "all") -> dict[str, Any]:
        """Aggregate history for one of 'today', 'week', 'month' or 'all'."""
        all_sessions = load_history().get("sessions", [])

        match period:
            case "today":
                cutoff = _start_of_today()
            case "week":
                cutoff = _start_of_today() - timedelta(days=7)
            case "month":
                cutoff = _start_of_today() - timedelta(days=30)
            case _:
                cutoff = None

        if cutoff is not None:
            sessions = [s for s in all_sessions if datetime.fromisoformat(s["timestamp"]) >= cutoff]
        else:
            sessions = all_sessions

        return {
            "period": period,
            "bytes_freed": sum(_session_bytes(s) for s in sessions),
            "failures": sum(_session_failures(s) for s in sessions),
            "session_count": len(sessions),
            "lifetime_bytes_freed": sum(_session_bytes(s) for s in all_sessions),
            "per_cleaner": self._aggregate_cleaner_stats(sessions),
        }

    def _build_session_entry(self) -> dict[str, Any]:
        details = []
        for r in self._session_results:
            detail: dict[str, Any] = {"cleaner_id": r.cleaner_id, "bytes_freed": r.freed_bytes}
            if r.error:
                detail["error"] = r.error
            details.append(detail)
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": details,
        }

    @staticmethod
    def _aggregate_cleaner_stats(sessions: list[dict[str, Any]]) -> dict[str, dict[str, int]]:
        totals: dict[str, dict[str, int]] = {}
        for session in sessions:
            for detail in session.get("details", []):
                cid = detail["cleaner_id"]
                entry = totals.setdefault(cid, {"bytes_freed": 0, "runs": 0})
                entry["bytes_freed"] += detail.get("bytes_freed", 0)
                entry["runs"] += 1
        return totals


def _session_bytes(session: dict[str, Any]) -> int:
    return sum(d.get("bytes_freed", 0) for d in session.get("details", []))


def _session_failures(session: dict[str, Any]) -> int:
    return sum(1 for d in session.get("details", []) if d.get("error"))


def _start_of_today() -> datetime:
    """Start of the current UTC day."""
    now = datetime.now(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)
