"""Messages streamed from the background engines to the coordinator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True, slots=True)
class ScanFound:
    """A target directory discovered by the scan engine."""

    path: str
    size_bytes: int
    sensitive: bool
    last_modified: int | None = None


@dataclass(frozen=True, slots=True)
class ScanDone:
    """Terminal scan message. Sent once, after every ScanFound."""


@dataclass(frozen=True, slots=True)
class DeleteProgress:
    """Sent before the delete engine attempts to remove *path*."""

    path: str


@dataclass(frozen=True, slots=True)
class DeleteDone:
    """Terminal delete message carrying the final totals."""

    freed_bytes: int = 0
    errors: list[str] = field(default_factory=list)


ScanMessage = Union[ScanFound, ScanDone]
DeleteMessage = Union[DeleteProgress, DeleteDone]
