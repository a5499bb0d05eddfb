"""Turn free-text cleaner output into reclaimed item records.

Cleaners report progress as prose, so this is a heuristic and lossy by
construction: any line that does not look like a removal report is
skipped, and sizes that cannot be read are estimated.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from cleansys.models.reclaimed import ItemKind, ReclaimedItem

log = logging.getLogger(__name__)

MARKERS = ("Removed", "cleaned", "Cleaning", "freed")

SIZE_RE = re.compile(r"(\d+\.?\d*)\s*(KB|MB|GB|bytes)")

_UNITS = {
    "KB": 1024,
    "MB": 1024**2,
    "GB": 1024**3,
    "bytes": 1,
}

_PATH_END = re.compile(r"[\"'\s]")


def find_path(line: str) -> str | None:
    """Return the first absolute-path-looking token in *line*.

    The path runs from the first ``/`` up to the next quote or
    whitespace.  A bare ``/`` is not considered a path.
    """
    start = line.find("/")
    if start < 0:
        return None
    end = _PATH_END.search(line, start)
    path = line[start : end.start() if end else len(line)].strip()
    return path if len(path) > 1 else None


def parse_size(line: str) -> int | None:
    """Return the first ``<number> <unit>`` size in *line*, in bytes."""
    match = SIZE_RE.search(line)
    if match is None:
        return None
    try:
        value = float(match.group(1))
    except ValueError:
        return None
    return int(value * _UNITS[match.group(2)])


def extract_items(
    output: str,
    bytes_freed: int,
    *,
    category: str,
    cleaner_name: str,
    now: datetime | None = None,
) -> list[ReclaimedItem]:
    """Build records for every removal reported in *output*.

    If the run freed space but no line could be parsed, exactly one
    summary record covering all of *bytes_freed* is returned instead, so
    every non-trivial run is visible in the result view.
    """
    now = now or datetime.now(timezone.utc)
    items: list[ReclaimedItem] = []

    for line in output.splitlines():
        if not any(marker in line for marker in MARKERS):
            continue
        path = find_path(line)
        if path is None:
            continue
        size = parse_size(line)
        if size is None:
            size = bytes_freed // 10
        kind = ItemKind.DIRECTORY if path.endswith("/") or "directory" in line else ItemKind.FILE
        items.append(
            ReclaimedItem(
                path=path,
                size_bytes=size,
                category=category,
                cleaner_name=cleaner_name,
                kind=kind,
                created_at=now,
            )
        )

    if not items and bytes_freed > 0:
        log.debug("No parsable output from %s, adding summary record", cleaner_name)
        items.append(summary_item(cleaner_name, bytes_freed, category=category, now=now))
    return items


def summary_item(cleaner_name: str, bytes_freed: int, *, category: str, now: datetime | None = None) -> ReclaimedItem:
    """Synthetic record standing in for a run whose output could not be parsed."""
    return ReclaimedItem(
        path=f"{cleaner_name} (cleaned files)",
        size_bytes=bytes_freed,
        category=category,
        cleaner_name=cleaner_name,
        kind=ItemKind.DIRECTORY,
        created_at=now or datetime.now(timezone.utc),
    )
