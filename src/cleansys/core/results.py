"""Bounded, queryable store of reclaimed items."""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Iterator

from cleansys.models.reclaimed import ReclaimedItem

log = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000


class SortMode(Enum):
    PATH = "path"
    SIZE = "size"
    RECENT = "recent"
    CATEGORY = "category"

    def next(self) -> SortMode:
        """The mode after this one, wrapping around."""
        members = list(SortMode)
        return members[(members.index(self) + 1) % len(members)]

    @property
    def label(self) -> str:
        return self.value.title()


class ResultStore:
    """Insertion-ordered collection of :class:`ReclaimedItem` records.

    Holds at most *capacity* records; inserting beyond that evicts the
    oldest one.  Queries return new lists and never reorder the store.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._items: deque[ReclaimedItem] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._items.maxlen or 0

    def insert(self, item: ReclaimedItem) -> None:
        if len(self._items) == self.capacity:
            log.debug("Result store full, evicting %s", self._items[0].path)
        self._items.append(item)

    def extend(self, items: list[ReclaimedItem]) -> None:
        for item in items:
            self.insert(item)

    def clear(self) -> None:
        self._items.clear()

    def query(
        self,
        search: str = "",
        category_filter: str = "",
        sort: SortMode = SortMode.RECENT,
    ) -> list[ReclaimedItem]:
        """Return matching records in *sort* order.

        A non-empty *search* matches path, category or cleaner name,
        case-insensitively, and takes precedence over *category_filter*,
        which is itself a case-insensitive substring of the category.
        """
        if search:
            needle = search.lower()
            items = [
                i
                for i in self._items
                if needle in i.path.lower() or needle in i.category.lower() or needle in i.cleaner_name.lower()
            ]
        elif category_filter:
            wanted = category_filter.lower()
            items = [i for i in self._items if wanted in i.category.lower()]
        else:
            items = list(self._items)

        match sort:
            case SortMode.PATH:
                items.sort(key=lambda i: i.path)
            case SortMode.SIZE:
                items.sort(key=lambda i: i.size_bytes, reverse=True)
            case SortMode.CATEGORY:
                items.sort(key=lambda i: i.category)
            case SortMode.RECENT:
                items.sort(key=lambda i: i.created_at, reverse=True)
        return items

    def category_totals(self) -> dict[str, tuple[int, int]]:
        """Map category to ``(count, total_bytes)``, largest total first."""
        totals: dict[str, tuple[int, int]] = {}
        for item in self._items:
            count, size = totals.get(item.category, (0, 0))
            totals[item.category] = (count + 1, size + item.size_bytes)
        return dict(sorted(totals.items(), key=lambda kv: kv[1][1], reverse=True))

    @property
    def total_bytes(self) -> int:
        return sum(i.size_bytes for i in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ReclaimedItem]:
        return iter(list(self._items))
