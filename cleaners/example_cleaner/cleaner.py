"""Example external cleaner for cleansys.

This demonstrates how to add a custom cleanup task.  Copy the directory
into ~/.local/share/cleansys/cleaners/ (or list its parent under
``cleaner_paths`` in settings.json) to have it discovered.
"""

from __future__ import annotations

from pathlib import Path

from cleansys.models.cleaner import CacheDirCleaner


class ExampleCleaner(CacheDirCleaner):
    """Empties ~/.cache/cleansys-example, a directory nothing else uses."""

    @property
    def id(self) -> str:
        return "example"

    @property
    def name(self) -> str:
        return "Example Cleaner"

    @property
    def description(self) -> str:
        return "An example cleaner showing how to extend cleansys with custom tasks."

    @property
    def category(self) -> str:
        return "custom"

    @property
    def _cache_dirs(self) -> tuple[Path, ...]:
        return (Path.home() / ".cache" / "cleansys-example",)
