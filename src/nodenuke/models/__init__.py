"""Nodenuke data models."""

from nodenuke.models.entry import DiscoveredEntry
from nodenuke.models.messages import (
    DeleteDone,
    DeleteMessage,
    DeleteProgress,
    ScanDone,
    ScanFound,
    ScanMessage,
)

__all__ = [
    "DeleteDone",
    "DeleteMessage",
    "DeleteProgress",
    "DiscoveredEntry",
    "ScanDone",
    "ScanFound",
    "ScanMessage",
]
