"""Cleaner for the system package manager cache (apt, pacman, dnf)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

import click

from cleansys.core.privileges import run_privileged
from cleansys.errors import CleanerError
from cleansys.models.cleaner import Cleaner
from cleansys.utils import dir_size, format_size, has_command

log = logging.getLogger(__name__)


class _Backend(NamedTuple):
    command: str
    cache_dir: Path
    args: tuple[str, ...]


_BACKENDS = (
    _Backend("apt-get", Path("/var/cache/apt/archives"), ("apt-get", "clean")),
    _Backend("pacman", Path("/var/cache/pacman/pkg"), ("pacman", "-Sc", "--noconfirm")),
    _Backend("dnf", Path("/var/cache/dnf"), ("dnf", "clean", "all")),
)


def _installed_backends() -> list[_Backend]:
    return [b for b in _BACKENDS if has_command(b.command) and b.cache_dir.is_dir()]


class PackageManagerCleaner(Cleaner):
    """Runs the native cache-clean command of every detected package manager."""

    id = "package_manager"
    name = "Package Manager Cache"
    description = "Clean package manager caches (apt, pacman, dnf)"
    requires_root = True
    sort_order = 20

    @property
    def unavailable_reason(self) -> str | None:
        if not _installed_backends():
            return "No supported package manager found"
        return None

    def execute(self, skip_confirmation: bool) -> int:
        backends = _installed_backends()
        if not backends:
            click.echo(f"Nothing to clean for {self.name}")
            return 0

        freed = 0
        failures: list[str] = []
        for backend in backends:
            if not skip_confirmation and not click.confirm(f"Run '{' '.join(backend.args)}'?", default=True):
                continue

            size_before = dir_size(backend.cache_dir)
            proc = run_privileged(list(backend.args))
            if proc.returncode != 0:
                log.warning("%s failed: %s", " ".join(backend.args), proc.stderr.strip())
                failures.append(f"{backend.command} failed: {proc.stderr.strip() or proc.returncode}")
                continue

            reclaimed = max(0, size_before - dir_size(backend.cache_dir))
            freed += reclaimed
            click.echo(f"Removed cached packages from {backend.cache_dir}/ ({format_size(reclaimed)})")

        if failures and freed == 0:
            raise CleanerError(failures[0])
        return freed
