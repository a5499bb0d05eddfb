"""Central cleaner registry."""

from __future__ import annotations

import logging
from typing import Iterator

from cleansys.models.cleaner import Cleaner

log = logging.getLogger(__name__)


class CleanerRegistry:
    """Stores and retrieves registered cleaners."""

    def __init__(self) -> None:
        self._cleaners: dict[str, Cleaner] = {}

    def register(self, cleaner: Cleaner) -> None:
        """Register a cleaner instance."""
        if cleaner.id in self._cleaners:
            log.warning("Cleaner '%s' already registered, skipping duplicate", cleaner.id)
            return
        self._cleaners[cleaner.id] = cleaner
        log.debug("Registered cleaner: %s (%s)", cleaner.id, cleaner.name)

    def get(self, cleaner_id: str) -> Cleaner | None:
        """Get a cleaner by its ID."""
        return self._cleaners.get(cleaner_id)

    def get_all(self) -> list[Cleaner]:
        """Get all registered cleaners."""
        return list(self._cleaners.values())

    def get_by_category(self, category: str) -> list[Cleaner]:
        """Get all cleaners in a given category, in display order."""
        return sorted(
            (c for c in self._cleaners.values() if c.category == category),
            key=lambda c: (c.sort_order, c.name),
        )

    def get_available(self) -> list[Cleaner]:
        """Get all cleaners that are available on this system."""
        available = []
        for cleaner in self._cleaners.values():
            try:
                if cleaner.is_available():
                    available.append(cleaner)
            except Exception:
                log.exception("Error checking availability for cleaner '%s'", cleaner.id)
        return available

    def categories(self) -> list[str]:
        """Category keys in first-registration order."""
        return list(dict.fromkeys(c.category for c in self._cleaners.values()))

    def __len__(self) -> int:
        return len(self._cleaners)

    def __iter__(self) -> Iterator[Cleaner]:
        return iter(self._cleaners.values())

    def __contains__(self, cleaner_id: str) -> bool:
        return cleaner_id in self._cleaners
