"""Tests for the reclaimed items store."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cleansys.core.results import ResultStore, SortMode
from cleansys.models.reclaimed import ItemKind, ReclaimedItem

BASE = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _item(path: str, size: int = 1, category: str = "User Cleaners", cleaner: str = "Trash", age: int = 0):
    return ReclaimedItem(
        path=path,
        size_bytes=size,
        category=category,
        cleaner_name=cleaner,
        kind=ItemKind.FILE,
        created_at=BASE + timedelta(seconds=age),
    )


@pytest.fixture
def store():
    s = ResultStore()
    s.insert(_item("/tmp/b.log", 300, "System Cleaners", "Journal", age=1))
    s.insert(_item("/home/u/.cache/a", 100, "User Cleaners", "Browser", age=3))
    s.insert(_item("/var/crash/c", 200, "System Cleaners", "Crash", age=2))
    return s


class TestCapacity:
    def test_default_capacity(self):
        assert ResultStore().capacity == 1000

    def test_bound_and_fifo_eviction(self):
        s = ResultStore()
        for i in range(1001):
            s.insert(_item(f"/tmp/{i}"))

        assert len(s) == 1000
        paths = [i.path for i in s]
        assert "/tmp/0" not in paths
        assert paths[0] == "/tmp/1"
        assert paths[-1] == "/tmp/1000"

    def test_custom_capacity(self):
        s = ResultStore(capacity=2)
        s.extend([_item("/a"), _item("/b"), _item("/c")])
        assert [i.path for i in s] == ["/b", "/c"]

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            ResultStore(capacity=0)

    def test_clear(self, store):
        store.clear()
        assert len(store) == 0
        assert store.query() == []


class TestQuery:
    def test_no_filters_returns_everything(self, store):
        assert len(store.query()) == 3

    def test_search_matches_path(self, store):
        assert [i.path for i in store.query(search=".CACHE")] == ["/home/u/.cache/a"]

    def test_search_matches_cleaner_name(self, store):
        assert [i.path for i in store.query(search="journal")] == ["/tmp/b.log"]

    def test_search_matches_category(self, store):
        assert len(store.query(search="system")) == 2

    def test_search_overrides_category_filter(self, store):
        result = store.query(search="browser", category_filter="System Cleaners")
        assert [i.path for i in result] == ["/home/u/.cache/a"]

    def test_category_filter_case_insensitive(self, store):
        result = store.query(category_filter="system cleaners")
        assert {i.path for i in result} == {"/tmp/b.log", "/var/crash/c"}

    def test_sort_by_path(self, store):
        paths = [i.path for i in store.query(sort=SortMode.PATH)]
        assert paths == sorted(paths)

    def test_sort_by_size_non_increasing(self, store):
        sizes = [i.size_bytes for i in store.query(sort=SortMode.SIZE)]
        assert sizes == [300, 200, 100]
        assert all(a >= b for a, b in zip(sizes, sizes[1:]))

    def test_sort_by_category(self, store):
        categories = [i.category for i in store.query(sort=SortMode.CATEGORY)]
        assert categories == sorted(categories)

    def test_sort_by_recent(self, store):
        paths = [i.path for i in store.query(sort=SortMode.RECENT)]
        assert paths == ["/home/u/.cache/a", "/var/crash/c", "/tmp/b.log"]

    def test_query_does_not_reorder_store(self, store):
        before = [i.path for i in store]
        store.query(sort=SortMode.SIZE)
        assert [i.path for i in store] == before


class TestCategoryTotals:
    def test_totals_largest_first(self, store):
        totals = store.category_totals()
        assert list(totals) == ["System Cleaners", "User Cleaners"]
        assert totals["System Cleaners"] == (2, 500)
        assert totals["User Cleaners"] == (1, 100)

    def test_total_bytes(self, store):
        assert store.total_bytes == 600

    def test_empty(self):
        assert ResultStore().category_totals() == {}


class TestSortMode:
    def test_cycle(self):
        assert SortMode.PATH.next() is SortMode.SIZE
        assert SortMode.SIZE.next() is SortMode.RECENT
        assert SortMode.RECENT.next() is SortMode.CATEGORY
        assert SortMode.CATEGORY.next() is SortMode.PATH

    def test_label(self):
        assert SortMode.RECENT.label == "Recent"
