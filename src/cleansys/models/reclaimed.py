"""Reclaimed item records shown in the detail view."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ItemKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"
    LOG = "log"


@dataclass(frozen=True, slots=True)
class ReclaimedItem:
    """One file or directory identified as removed by a cleaner run."""

    path: str
    size_bytes: int
    category: str
    cleaner_name: str
    kind: ItemKind = ItemKind.FILE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def filename(self) -> str:
        """Last path component, or the whole path for synthetic records."""
        name = self.path.rstrip("/").rsplit("/", 1)[-1]
        return name or self.path
