"""Static catalog of cleaners grouped into display categories."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, NamedTuple, Sequence

from cleansys.core.registry import CleanerRegistry
from cleansys.models.cleaner import Cleaner, FunctionCleaner, RunFunction

log = logging.getLogger(__name__)

CATEGORY_INFO: dict[str, tuple[str, str]] = {
    "user": ("User Cleaners", "Clean user-level caches and temporary files"),
    "system": ("System Cleaners", "Clean system-wide caches, logs and crash data (requires root)"),
}

_CATEGORY_ORDER = ("user", "system")

CleanerTuple = tuple[str, str, bool, RunFunction]


class EntryRef(NamedTuple):
    """Position of one cleaner in the catalog (category index, item index)."""

    category: int
    item: int


@dataclass(frozen=True)
class CatalogCategory:
    """One tab of cleaners."""

    key: str
    name: str
    description: str
    cleaners: tuple[Cleaner, ...]

    def __len__(self) -> int:
        return len(self.cleaners)


class Catalog:
    """Read-only, ordered list of categories and their cleaners."""

    def __init__(self, categories: Sequence[CatalogCategory]) -> None:
        self._categories = tuple(c for c in categories if c.cleaners)

    @classmethod
    def from_registry(cls, registry: CleanerRegistry, available_only: bool = True) -> Catalog:
        """Group registered cleaners by category key.

        Known categories come first in a fixed order; any others follow
        in registration order.
        """
        pool = registry.get_available() if available_only else registry.get_all()
        keys = [k for k in _CATEGORY_ORDER if k in registry.categories()]
        keys += [k for k in registry.categories() if k not in keys]

        categories: list[CatalogCategory] = []
        for key in keys:
            members = tuple(c for c in registry.get_by_category(key) if c in pool)
            name, description = CATEGORY_INFO.get(key, (key.replace("_", " ").title(), ""))
            categories.append(CatalogCategory(key=key, name=name, description=description, cleaners=members))
        catalog = cls(categories)
        log.debug("Catalog built with %d categories, %d cleaners", len(catalog), catalog.entry_count)
        return catalog

    @classmethod
    def from_tuples(cls, layout: Sequence[tuple[str, str, Sequence[CleanerTuple]]]) -> Catalog:
        """Build a catalog from ``(name, description, [(name, desc, root, fn), ...])``."""
        categories = []
        for cat_name, cat_description, items in layout:
            key = cat_name.lower().replace(" ", "_")
            cleaners = tuple(
                FunctionCleaner(name, description, requires_root, fn, category=key)
                for name, description, requires_root, fn in items
            )
            categories.append(CatalogCategory(key=key, name=cat_name, description=cat_description, cleaners=cleaners))
        return cls(categories)

    @property
    def categories(self) -> tuple[CatalogCategory, ...]:
        return self._categories

    @property
    def entry_count(self) -> int:
        return sum(len(c) for c in self._categories)

    def entry(self, ref: EntryRef) -> Cleaner:
        return self._categories[ref.category].cleaners[ref.item]

    def category_of(self, ref: EntryRef) -> CatalogCategory:
        return self._categories[ref.category]

    def refs(self) -> Iterator[EntryRef]:
        """All entry positions in catalog order."""
        for ci, category in enumerate(self._categories):
            for ii in range(len(category)):
                yield EntryRef(ci, ii)

    def find(self, cleaner_id: str) -> EntryRef | None:
        for ref in self.refs():
            if self.entry(ref).id == cleaner_id:
                return ref
        return None

    def __len__(self) -> int:
        return len(self._categories)

    def __getitem__(self, index: int) -> CatalogCategory:
        return self._categories[index]

    def __iter__(self) -> Iterator[CatalogCategory]:
        return iter(self._categories)
