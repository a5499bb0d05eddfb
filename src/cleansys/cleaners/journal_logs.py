"""Cleaner for systemd journal logs."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from cleansys.core.privileges import run_privileged
from cleansys.errors import CleanerError
from cleansys.models.cleaner import Cleaner
from cleansys.utils import dir_size, format_size, has_command

log = logging.getLogger(__name__)

_JOURNAL_DIR = Path("/var/log/journal")
_KEEP = "100M"


class JournalLogsCleaner(Cleaner):
    """Vacuums the systemd journal down to the most recent 100 MB."""

    id = "journal_logs"
    name = "Journal Logs"
    description = "Remove old systemd journal logs, keeping the most recent 100 MB"
    requires_root = True
    sort_order = 10

    @property
    def unavailable_reason(self) -> str | None:
        if not has_command("journalctl"):
            return "journalctl not found"
        if not _JOURNAL_DIR.is_dir():
            return "Journal directory not found"
        return None

    def execute(self, skip_confirmation: bool) -> int:
        if not skip_confirmation and not click.confirm(f"Vacuum journal logs to {_KEEP}?", default=True):
            return 0

        size_before = dir_size(_JOURNAL_DIR)
        proc = run_privileged(["journalctl", f"--vacuum-size={_KEEP}"])
        if proc.returncode != 0:
            raise CleanerError(f"journalctl vacuum failed: {proc.stderr.strip() or proc.returncode}")

        freed = max(0, size_before - dir_size(_JOURNAL_DIR))
        if freed:
            click.echo(f"Removed archived journal files in {_JOURNAL_DIR}/ ({format_size(freed)})")
        else:
            click.echo("Journal already below the size limit, nothing freed")
        return freed
