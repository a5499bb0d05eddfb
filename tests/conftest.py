"""Shared test fixtures."""

from __future__ import annotations

import pytest

import cleansys.storage as storage
from cleansys.core.catalog import Catalog
from cleansys.settings import Settings


@pytest.fixture(autouse=True)
def isolate_xdg(tmp_path, monkeypatch):
    """Point XDG directories at a temp tree and drop the settings singleton."""
    for var, name in (("XDG_CONFIG_HOME", "config"), ("XDG_DATA_HOME", "data"), ("XDG_CACHE_HOME", "cache")):
        path = tmp_path / "xdg" / name
        path.mkdir(parents=True)
        monkeypatch.setenv(var, str(path))
    monkeypatch.setattr(Settings, "_instance", None)


@pytest.fixture
def isolate_storage(tmp_path, monkeypatch):
    """Redirect history storage to a temp directory."""
    data_dir = tmp_path / "cleansys_data"
    data_dir.mkdir()
    history_file = data_dir / "history.json"
    monkeypatch.setattr(storage, "HISTORY_FILE", history_file)
    monkeypatch.setattr(storage, "_DATA_DIR", data_dir)
    return history_file


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def _runner(freed: int, output: str = "", fail: str | None = None):
    def run(skip_confirmation: bool) -> int:
        if output:
            print(output)
        if fail:
            raise RuntimeError(fail)
        return freed

    return run


@pytest.fixture
def catalog():
    """Two categories: three user cleaners and two root cleaners."""
    return Catalog.from_tuples(
        [
            (
                "User Cleaners",
                "Per-user caches",
                [
                    ("Browser", "browser caches", False, _runner(2048, "Removed /home/u/.cache/b/x (2.00 KB)")),
                    ("Thumbs", "thumbnails", False, _runner(4096)),
                    ("Broken", "always fails", False, _runner(0, fail="Failed to clean Broken: /x: Permission denied")),
                ],
            ),
            (
                "System Cleaners",
                "Root-only",
                [
                    ("Journal", "journal logs", True, _runner(1024 * 1024)),
                    ("Crash", "core dumps", True, _runner(512)),
                ],
            ),
        ]
    )
