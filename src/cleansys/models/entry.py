"""File entry dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class FileEntry:
    """Single file or directory a cleaner is about to remove."""

    path: Path
    size_bytes: int
    description: str
