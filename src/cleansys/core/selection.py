"""Selection state and cursor over the catalog."""

from __future__ import annotations

import logging
from typing import Iterator

from cleansys.core.catalog import Catalog, EntryRef
from cleansys.models.run_state import RunState, StatusKind

log = logging.getLogger(__name__)


class SelectionModel:
    """Tracks checked entries, the per-entry RunState grid and the cursor.

    Selection ignores elevation on purpose: users can build a mixed
    selection first and are asked to authenticate only when the run is
    requested.  All counters are derived from the RunState grid on
    demand.
    """

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self._states: list[list[RunState]] = [[RunState() for _ in category.cleaners] for category in catalog]
        self.category_index = 0
        self.item_index = 0

    # -- State access --

    def state(self, ref: EntryRef) -> RunState:
        return self._states[ref.category][ref.item]

    def states(self) -> Iterator[tuple[EntryRef, RunState]]:
        for ref in self.catalog.refs():
            yield ref, self.state(ref)

    def category_states(self, category: int) -> list[RunState]:
        return list(self._states[category])

    # -- Mutators --

    def toggle(self, category: int, item: int) -> bool:
        """Flip selection of one entry and return its new value."""
        state = self._states[category][item]
        state.selected = not state.selected
        return state.selected

    def toggle_current(self) -> bool | None:
        if not self._states or not self._states[self.category_index]:
            return None
        return self.toggle(self.category_index, self.item_index)

    def select_all(self, category: int | None = None) -> None:
        """Select every entry of one category (the cursor's by default)."""
        self._set_category(self.category_index if category is None else category, True)

    def deselect_all(self, category: int | None = None) -> None:
        self._set_category(self.category_index if category is None else category, False)

    def _set_category(self, category: int, value: bool) -> None:
        if not self._states:
            return
        for state in self._states[category]:
            state.selected = value

    def deselect(self, ref: EntryRef) -> None:
        self.state(ref).selected = False

    def clear_errors(self) -> int:
        """Reset every Error status to None and return how many were cleared."""
        cleared = 0
        for _ref, state in self.states():
            if state.is_kind(StatusKind.ERROR):
                state.status = None
                cleared += 1
        return cleared

    # -- Cursor --

    def next_item(self) -> None:
        size = self._current_size()
        if size:
            self.item_index = 0 if self.item_index >= size - 1 else self.item_index + 1

    def previous_item(self) -> None:
        size = self._current_size()
        if size:
            self.item_index = size - 1 if self.item_index == 0 else self.item_index - 1

    def first_item(self) -> None:
        self.item_index = 0

    def last_item(self) -> None:
        self.item_index = max(0, self._current_size() - 1)

    def next_category(self) -> None:
        if self._states:
            self.category_index = (self.category_index + 1) % len(self._states)
            self.item_index = 0

    def previous_category(self) -> None:
        if self._states:
            self.category_index = (self.category_index - 1) % len(self._states)
            self.item_index = 0

    def _current_size(self) -> int:
        return len(self._states[self.category_index]) if self._states else 0

    @property
    def cursor(self) -> EntryRef:
        return EntryRef(self.category_index, self.item_index)

    # -- Queries --

    def selected_refs(self) -> list[EntryRef]:
        """Selected entries in catalog order."""
        return [ref for ref, state in self.states() if state.selected]

    def has_any_selected(self) -> bool:
        return any(state.selected for _ref, state in self.states())

    def requires_elevation(self, elevated: bool) -> bool:
        """True iff a selected entry needs root and the session is not elevated."""
        if elevated:
            return False
        return any(self.catalog.entry(ref).requires_root for ref in self.selected_refs())

    @property
    def selected_count(self) -> int:
        return sum(1 for _ref, state in self.states() if state.selected)

    @property
    def error_count(self) -> int:
        return sum(1 for _ref, state in self.states() if state.is_kind(StatusKind.ERROR))

    @property
    def operation_count(self) -> int:
        """Entries that have any status in the current or last run."""
        return sum(1 for _ref, state in self.states() if state.status is not None)

    def count(self, kind: StatusKind) -> int:
        return sum(1 for _ref, state in self.states() if state.is_kind(kind))
