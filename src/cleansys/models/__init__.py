"""cleansys data models."""

from cleansys.models.cleaner import CacheDirCleaner, Cleaner, EntryCleaner, FunctionCleaner
from cleansys.models.clean_result import CleanResult
from cleansys.models.entry import FileEntry
from cleansys.models.reclaimed import ItemKind, ReclaimedItem
from cleansys.models.run_state import RunState, RunStatus, StatusKind

__all__ = [
    "CacheDirCleaner",
    "CleanResult",
    "Cleaner",
    "EntryCleaner",
    "FileEntry",
    "FunctionCleaner",
    "ItemKind",
    "ReclaimedItem",
    "RunState",
    "RunStatus",
    "StatusKind",
]
