"""Discovered directory dataclass."""

from __future__ import annotations

from dataclasses import dataclass

from nodenuke.models.messages import ScanFound


@dataclass(slots=True)
class DiscoveredEntry:
    """A single target directory found by a scan.

    ``size_bytes``, ``sensitive`` and ``last_modified`` are fixed when the
    scan reports the directory. Only ``selected`` changes afterwards, and
    only through the coordinator's selection operations.
    """

    path: str
    size_bytes: int
    sensitive: bool
    selected: bool
    last_modified: int | None = None

    @classmethod
    def from_found(cls, msg: ScanFound) -> DiscoveredEntry:
        """Build an entry from a scan message, selecting it unless sensitive."""
        return cls(
            path=msg.path,
            size_bytes=msg.size_bytes,
            sensitive=msg.sensitive,
            selected=not msg.sensitive,
            last_modified=msg.last_modified,
        )
