"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

import click

from cleansys.models.entry import FileEntry

log = logging.getLogger(__name__)

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024


def has_command(name: str) -> bool:
    """Check if a command exists on the system."""
    return shutil.which(name) is not None


def xdg_cache_home() -> Path:
    """Return XDG_CACHE_HOME, defaulting to ~/.cache."""
    return Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def xdg_data_home() -> Path:
    """Return XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def remove_entries(
    entries: list[FileEntry],
    *,
    privileged: bool = False,
    recreate_dirs: bool = False,
) -> tuple[int, list[str]]:
    """Remove file entries and return (freed_bytes, errors).

    Every successful removal is reported on stdout as a
    ``Removed <path> (<size>)`` line; directories are reported with a
    trailing slash.  When *privileged* is set and the process is not
    root, removal goes through ``sudo -n rm`` so a cached sudo
    timestamp is reused without prompting.

    Args:
        entries: FileEntry items to remove.
        privileged: Remove through sudo when not running as root.
        recreate_dirs: If True, recreate directories after removal.
    """
    from cleansys.core.privileges import is_root, privileged_command

    freed = 0
    errors: list[str] = []
    use_sudo = privileged and not is_root()

    for entry in entries:
        is_dir = entry.path.is_dir()
        try:
            if use_sudo:
                proc = subprocess.run(
                    privileged_command(["rm", "-rf", "--", str(entry.path)]),
                    capture_output=True,
                    text=True,
                    timeout=120,
                )
                if proc.returncode != 0:
                    raise OSError(proc.stderr.strip() or f"rm exited with {proc.returncode}")
            elif is_dir:
                shutil.rmtree(entry.path)
            elif entry.path.exists() or entry.path.is_symlink():
                entry.path.unlink()
            if is_dir and recreate_dirs and not use_sudo:
                entry.path.mkdir(parents=True, exist_ok=True)
        except (OSError, subprocess.TimeoutExpired) as e:
            errors.append(f"{entry.path}: {getattr(e, 'strerror', None) or e}")
            continue

        freed += entry.size_bytes
        if is_dir:
            click.echo(f"Removed directory {entry.path}/ ({format_size(entry.size_bytes)})")
        else:
            click.echo(f"Removed {entry.path} ({format_size(entry.size_bytes)})")

    return freed, errors


def dir_info(path: Path | str) -> tuple[int, int]:
    """Calculate total size and file count of a directory tree.

    Uses GNU ``find`` (C-speed walk) when available, falling back to
    ``os.scandir`` on systems without it.

    Returns:
        (total_bytes, file_count) tuple.
    """
    try:
        return _dir_info_find(str(path))
    except (OSError, ValueError, subprocess.SubprocessError):
        return _dir_info_scandir(path)


def _dir_info_find(path_str: str) -> tuple[int, int]:
    """Walk a directory tree using GNU find."""
    proc = subprocess.run(
        ["find", path_str, "-type", "f", "-printf", "%s\n"],
        capture_output=True,
        timeout=60,
    )
    total = count = 0
    for line in proc.stdout.split(b"\n"):
        if line:
            total += int(line)
            count += 1
    return total, count


def _dir_info_scandir(path: Path | str) -> tuple[int, int]:
    """Walk a directory tree using os.scandir (pure Python fallback)."""
    total = 0
    count = 0
    stack: list[Path | str] = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                            count += 1
                        elif entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                    except OSError:
                        pass
        except OSError:
            pass
    return total, count


def dir_size(path: Path) -> int:
    """Calculate total size of a directory tree."""
    return dir_info(path)[0]


def entry_for(path: Path, description: str) -> FileEntry | None:
    """Build a FileEntry for *path*, or None if it is empty or unreadable."""
    try:
        if path.is_dir() and not path.is_symlink():
            size = dir_size(path)
        else:
            size = path.lstat().st_size
    except OSError:
        log.debug("Cannot access: %s", path)
        return None
    if size <= 0:
        return None
    return FileEntry(path=path, size_bytes=size, description=description)


def format_size(size_bytes: int) -> str:
    """Format a byte count the way cleaner output reports it.

    The unit spelling (``KB``/``MB``/``GB``/``bytes``) is what the
    output extractor recognises, so cleaners should always use this
    rather than :func:`bytes_to_human` when printing progress lines.
    """
    if size_bytes >= _GB:
        return f"{size_bytes / _GB:.2f} GB"
    if size_bytes >= _MB:
        return f"{size_bytes / _MB:.2f} MB"
    if size_bytes >= _KB:
        return f"{size_bytes / _KB:.2f} KB"
    return f"{size_bytes} bytes"


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} {units[-1]}"


def format_relative_time(iso_timestamp: str) -> str:
    """Format an ISO timestamp as relative time ('2 hours ago')."""
    from datetime import datetime, timezone

    dt = datetime.fromisoformat(iso_timestamp)
    seconds = int((datetime.now(timezone.utc) - dt).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        m = seconds // 60
        return f"{m} minute{'s' if m != 1 else ''} ago"
    if seconds < 86400:
        h = seconds // 3600
        return f"{h} hour{'s' if h != 1 else ''} ago"
    d = seconds // 86400
    if d < 30:
        return f"{d} day{'s' if d != 1 else ''} ago"
    mo = d // 30
    if mo < 12:
        return f"{mo} month{'s' if mo != 1 else ''} ago"
    y = d // 365
    return f"{y} year{'s' if y != 1 else ''} ago"


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 60:
        return f"{int(seconds)}s"
    minutes = int(seconds) // 60
    secs = int(seconds) - minutes * 60
    return f"{minutes}m {secs}s"
