"""Cleaning result dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class CleanResult:
    """Outcome of one cleaner within a run, as recorded in history."""

    cleaner_id: str
    freed_bytes: int = 0
    error: str = ""
