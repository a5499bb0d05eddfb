"""Cleaner discovery and loading."""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
import pkgutil
from pathlib import Path
from types import ModuleType

from cleansys.core.registry import CleanerRegistry
from cleansys.models.cleaner import CacheDirCleaner, Cleaner, EntryCleaner, FunctionCleaner
from cleansys.settings import Settings
from cleansys.utils import xdg_data_home

log = logging.getLogger(__name__)

# Abstract or adapter classes that should not be instantiated
_ABSTRACT_BASES = {Cleaner, EntryCleaner, CacheDirCleaner, FunctionCleaner}

# Standard cleaner search paths
_SYSTEM_CLEANER_DIR = Path("/usr/share/cleansys/cleaners")
_USER_CLEANER_DIR = xdg_data_home() / "cleansys" / "cleaners"


def _find_cleaners_in_module(module: ModuleType) -> list[type[Cleaner]]:
    """Find all concrete Cleaner subclasses defined in a module."""
    found: list[type[Cleaner]] = []
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if (
            issubclass(obj, Cleaner)
            and obj not in _ABSTRACT_BASES
            and not inspect.isabstract(obj)
            and obj.__module__ == module.__name__
        ):
            found.append(obj)
    return found


def _load_builtin_cleaners() -> list[type[Cleaner]]:
    """Load cleaners from the cleansys.cleaners package."""
    import cleansys.cleaners as cleaners_pkg

    found: list[type[Cleaner]] = []
    for _importer, modname, _ispkg in pkgutil.iter_modules(cleaners_pkg.__path__):
        try:
            module = importlib.import_module(f"cleansys.cleaners.{modname}")
            found.extend(_find_cleaners_in_module(module))
        except Exception:
            log.exception("Failed to load built-in cleaner module: %s", modname)
    return found


def _load_cleaners_from_directory(directory: Path) -> list[type[Cleaner]]:
    """Load cleaners from an external directory of modules or packages."""
    if not directory.is_dir():
        return []

    found: list[type[Cleaner]] = []
    for path in sorted(directory.iterdir()):
        if path.is_dir() and (path / "__init__.py").exists():
            module_file = path / "cleaner.py"
            if not module_file.exists():
                module_file = path / "__init__.py"
        elif path.suffix == ".py" and path.name != "__init__.py":
            module_file = path
        else:
            continue

        try:
            spec = importlib.util.spec_from_file_location(f"cleansys_ext_{path.stem}", module_file)
            if spec is None or spec.loader is None:
                continue
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            found.extend(_find_cleaners_in_module(module))
        except Exception:
            log.exception("Failed to load cleaner from: %s", module_file)
    return found


def load_cleaners(registry: CleanerRegistry, settings: Settings | None = None) -> None:
    """Discover and register all cleaners.

    Searches in order: built-in, system-wide, user-local, then any
    directories listed under ``cleaner_paths`` in settings.
    """
    settings = settings or Settings.instance()
    cleaner_classes: list[type[Cleaner]] = []

    cleaner_classes.extend(_load_builtin_cleaners())
    cleaner_classes.extend(_load_cleaners_from_directory(_SYSTEM_CLEANER_DIR))
    cleaner_classes.extend(_load_cleaners_from_directory(_USER_CLEANER_DIR))
    for raw in settings.get("cleaner_paths", []) or []:
        cleaner_classes.extend(_load_cleaners_from_directory(Path(raw).expanduser()))

    for cls in cleaner_classes:
        try:
            registry.register(cls())
        except Exception:
            log.exception("Failed to instantiate cleaner: %s", cls.__name__)

    log.info("Loaded %d cleaners", len(registry))
