"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

log = logging.getLogger(__name__)


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def dir_size(path: Path | str, cancelled: threading.Event | None = None) -> int:
    """Calculate the total size of every file under a directory tree.

    Hidden entries are included. Symlinks to files count the size of
    their target; symlinks to directories are not followed. Anything that
    cannot be read (permissions, broken links, files removed mid-walk)
    contributes zero, so this never raises.

    Performs blocking I/O and is meant to run on a worker thread. Once
    *cancelled* is set the walk stops before the next directory and the
    partial total is returned.
    """
    total = 0
    stack: list[Path | str] = [path]
    while stack:
        if cancelled is not None and cancelled.is_set():
            log.debug("Size walk of %s cancelled", path)
            break
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                        elif entry.is_file():
                            total += entry.stat().st_size
                    except OSError:
                        log.debug("Cannot stat: %s", entry.path)
        except OSError:
            log.debug("Cannot read directory: %s", current)
    return total


def bytes_to_human(size_bytes: int) -> str:
    """Convert a byte count to a human-readable string (decimal units)."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "kB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1000:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1000
    return f"{value:.1f} {units[-1]}"


def format_age(seconds: int) -> str:
    """Format an age in seconds as a short 'time ago' string."""
    seconds = max(seconds, 0)
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86_400:
        return f"{seconds // 3600}h ago"
    if seconds < 7 * 86_400:
        return f"{seconds // 86_400}d ago"
    if seconds < 30 * 86_400:
        return f"{seconds // (7 * 86_400)}w ago"
    if seconds < 365 * 86_400:
        return f"{seconds // (30 * 86_400)}mo ago"
    return f"{seconds // (365 * 86_400)}y ago"


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"


def truncate_left(text: str, max_width: int) -> str:
    """Shorten *text* to *max_width* characters, eliding from the left.

    The tail of a path is usually the meaningful part, so
    ``/home/alice/projects/app/node_modules`` becomes
    ``…/projects/app/node_modules`` rather than losing the directory name.
    """
    if len(text) <= max_width:
        return text
    if max_width <= 1:
        return "…"[:max_width]
    return "…" + text[len(text) - max_width + 1:]
