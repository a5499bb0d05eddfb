"""Base cleaner interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable

import click

from cleansys.errors import CleanerError
from cleansys.models.entry import FileEntry

log = logging.getLogger(__name__)

RunFunction = Callable[[bool], int]


class Cleaner(ABC):
    """Base class for all cleanup operations.

    A cleaner is an opaque capability as far as the scheduler is
    concerned: it exposes metadata and :meth:`execute`, which frees
    space, may print progress text, and returns the number of bytes
    freed.  Failures are signalled by raising.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique identifier, e.g. 'trash'."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name, e.g. 'Trash'."""

    @property
    @abstractmethod
    def description(self) -> str:
        """What this cleaner removes."""

    @property
    def category(self) -> str:
        """Category key: 'user' or 'system'."""
        return "system" if self.requires_root else "user"

    @property
    def requires_root(self) -> bool:
        """Whether this cleaner needs elevated privileges."""
        return False

    @property
    def sort_order(self) -> int:
        """Display order within category (lower = first). Default 50."""
        return 50

    @property
    def unavailable_reason(self) -> str | None:
        """Why this cleaner cannot work on this system, or None if supported."""
        return None

    def is_available(self) -> bool:
        """Check if this cleaner is applicable on the current system."""
        return self.unavailable_reason is None

    @abstractmethod
    def execute(self, skip_confirmation: bool) -> int:
        """Perform the cleanup and return the number of bytes freed.

        Raises:
            CleanerError: If the operation failed.
        """


class FunctionCleaner(Cleaner):
    """Adapts a plain ``run(skip_confirmation) -> bytes`` function.

    Used for catalogs supplied as ``(name, description, requires_root,
    run_fn)`` tuples by an external loader.
    """

    def __init__(
        self,
        name: str,
        description: str,
        requires_root: bool,
        run: RunFunction,
        category: str | None = None,
    ) -> None:
        self._name = name
        self._description = description
        self._requires_root = requires_root
        self._run = run
        self._category = category

    @property
    def id(self) -> str:
        return self._name.lower().replace(" ", "_")

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def category(self) -> str:
        return self._category or super().category

    @property
    def requires_root(self) -> bool:
        return self._requires_root

    def execute(self, skip_confirmation: bool) -> int:
        return int(self._run(skip_confirmation))


class EntryCleaner(Cleaner, ABC):
    """Base class for cleaners that remove a list of files or directories.

    Subclasses implement :meth:`collect`; removal, confirmation and
    progress output are provided.  Root cleaners remove through sudo
    when the process itself is not root.
    """

    _recreate_dirs: bool = False

    @abstractmethod
    def collect(self) -> list[FileEntry]:
        """Find what would be removed. MUST NOT delete anything."""

    def execute(self, skip_confirmation: bool) -> int:
        entries = self.collect()
        if not entries:
            click.echo(f"Nothing to clean for {self.name}")
            return 0

        total = sum(e.size_bytes for e in entries)
        if not skip_confirmation:
            from cleansys.utils import format_size

            if not click.confirm(f"Clean {self.name} ({format_size(total)} to be freed)?", default=True):
                return 0

        from cleansys.utils import remove_entries

        freed, errors = remove_entries(entries, privileged=self.requires_root, recreate_dirs=self._recreate_dirs)
        for error in errors:
            log.warning("%s: %s", self.id, error)
        if errors and freed == 0:
            raise CleanerError(f"Failed to clean {self.name}: {errors[0]}")
        return freed


class CacheDirCleaner(EntryCleaner, ABC):
    """Base class for cleaners that empty one or more cache directories.

    Each direct child of every existing directory in :attr:`_cache_dirs`
    becomes one entry; the directories themselves are kept.
    """

    @property
    @abstractmethod
    def _cache_dirs(self) -> tuple[Path, ...]:
        """Directories whose contents are removed."""

    def _skip(self, child: Path) -> bool:
        """Hook for subclasses to exclude specific children."""
        return False

    @property
    def unavailable_reason(self) -> str | None:
        if not any(d.is_dir() for d in self._cache_dirs):
            return f"{self.name} not found"
        return None

    def collect(self) -> list[FileEntry]:
        from cleansys.utils import entry_for

        entries: list[FileEntry] = []
        for cache_dir in self._cache_dirs:
            if not cache_dir.is_dir():
                continue
            try:
                children = sorted(cache_dir.iterdir())
            except OSError:
                log.debug("Cannot read %s", cache_dir)
                continue
            for child in children:
                if self._skip(child):
                    continue
                entry = entry_for(child, f"{self.name}: {child.name}")
                if entry is not None:
                    entries.append(entry)
        return entries
