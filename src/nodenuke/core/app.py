"""Coordinator state: phases, discovered entries, selection and engine draining.

The coordinator runs on the presentation thread. It never touches the
filesystem itself; it starts the scan and delete engines, then on every
tick pulls whatever messages they have produced without waiting::

    IDLE ──begin_scan──► SCANNING ──ScanDone──► REVIEWING ──request_delete──► CONFIRMING
                             │                      ▲                             │
                             │ (nothing found)      └────────cancel_delete────────┤
                             ▼                                                    │ begin_delete
                          FINISHED ◄──────────DeleteDone──────── DELETING ◄───────┘

At most one engine is active at a time.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field

from nodenuke.core.channel import Receiver
from nodenuke.core.deleter import start_delete
from nodenuke.core.scanner import DEFAULT_TARGET_NAME, DEFAULT_WORKERS, ScanHandle, start_scan
from nodenuke.errors import InvalidTransition
from nodenuke.models.entry import DiscoveredEntry
from nodenuke.models.messages import DeleteDone, DeleteMessage, DeleteProgress, ScanDone, ScanFound

log = logging.getLogger(__name__)


class Phase(enum.Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    REVIEWING = "reviewing"
    CONFIRMING = "confirming"
    DELETING = "deleting"
    FINISHED = "finished"


@dataclass
class DeleteRun:
    """Progress of one in-flight bulk deletion."""

    receiver: Receiver[DeleteMessage]
    total: int
    done: int = 0
    current: str = ""
    freed_bytes: int = 0
    errors: list[str] = field(default_factory=list)


def resolve_scan_root(root: str | None = None) -> str:
    """Return *root*, or the current directory when none was given."""
    if root:
        return root
    try:
        return os.getcwd()
    except OSError:
        return "."


class App:
    """Owns every piece of state the presentation layer reads."""

    def __init__(
        self,
        scan_root: str | None = None,
        target_name: str = DEFAULT_TARGET_NAME,
        workers: int = DEFAULT_WORKERS,
    ) -> None:
        self.scan_root = resolve_scan_root(scan_root)
        self.target_name = target_name
        self.workers = workers
        self.phase = Phase.IDLE
        self.entries: list[DiscoveredEntry] = []
        self.highlighted: int | None = None

        self.scan: ScanHandle | None = None
        self._last_scanning_path = ""

        self.delete_run: DeleteRun | None = None
        self.delete_total = 0
        self.delete_freed = 0
        self.delete_errors: list[str] = []

    def _expect(self, *phases: Phase) -> None:
        if self.phase not in phases:
            allowed = ", ".join(p.name for p in phases)
            raise InvalidTransition(f"cannot do this while {self.phase.name} (expected {allowed})")

    # -- Lifecycle --

    def begin_scan(self) -> None:
        """Start scanning ``scan_root``. Only valid before anything else ran."""
        self._expect(Phase.IDLE)
        self.entries.clear()
        self.highlighted = None
        self._last_scanning_path = ""
        self.scan = start_scan(self.scan_root, self.target_name, self.workers)
        self.phase = Phase.SCANNING
        log.info("Scanning %s", self.scan_root)

    def tick(self) -> None:
        """Apply every message the active engine has produced so far."""
        match self.phase:
            case Phase.SCANNING:
                self.process_scan_messages()
            case Phase.DELETING:
                self.process_delete_messages()
            case Phase.IDLE | Phase.REVIEWING | Phase.CONFIRMING | Phase.FINISHED:
                pass

    def process_scan_messages(self) -> None:
        scan = self.scan
        if scan is None or scan.done:
            return

        while (msg := scan.receiver.try_recv()) is not None:
            match msg:
                case ScanFound():
                    self.entries.append(DiscoveredEntry.from_found(msg))
                case ScanDone():
                    scan.done = True
                    self._finish_scan()
                    break

        if self.scan is scan and scan.receiver.disconnected:
            log.warning("Scan worker stopped without a completion report")
            scan.done = True
            self._finish_scan()

    def _finish_scan(self) -> None:
        self.scan = None
        self.entries.sort(key=lambda e: e.size_bytes, reverse=True)
        if self.entries:
            self.highlighted = 0
            self.phase = Phase.REVIEWING
        else:
            self.phase = Phase.FINISHED
        log.info("Scan complete: %d director%s found", len(self.entries), "y" if len(self.entries) == 1 else "ies")

    def current_scanning_path(self) -> str:
        """The directory the scan is visiting, or the last value seen."""
        if self.scan is None:
            return ""
        value = self.scan.current_path.try_get()
        if value is not None:
            self._last_scanning_path = value
        return self._last_scanning_path

    def request_delete(self) -> bool:
        """Ask for confirmation. A no-op unless something is selected."""
        self._expect(Phase.REVIEWING)
        if self.selected_count() == 0:
            return False
        self.phase = Phase.CONFIRMING
        return True

    def cancel_delete(self) -> None:
        self._expect(Phase.CONFIRMING)
        self.phase = Phase.REVIEWING

    def begin_delete(self) -> None:
        """Start removing a snapshot of the currently selected paths."""
        self._expect(Phase.CONFIRMING)
        paths = self.selected_paths()
        self.delete_total = len(paths)
        self.delete_freed = 0
        self.delete_errors = []
        self.delete_run = DeleteRun(receiver=start_delete(paths), total=len(paths))
        self.phase = Phase.DELETING

    def process_delete_messages(self) -> None:
        run = self.delete_run
        if run is None:
            return

        while (msg := run.receiver.try_recv()) is not None:
            match msg:
                case DeleteProgress(path=path):
                    run.current = path
                    run.done += 1
                case DeleteDone(freed_bytes=freed, errors=errors):
                    run.freed_bytes = freed
                    run.errors = list(errors)
                    self.delete_freed = freed
                    self.delete_errors = list(errors)
                    self.delete_run = None
                    self.phase = Phase.FINISHED
                    break

        if self.delete_run is run and run.receiver.disconnected:
            log.warning("Delete worker stopped without a completion report")
            self.delete_errors = [f"delete stopped after {run.done} of {run.total} directories"]
            self.delete_run = None
            self.phase = Phase.FINISHED

    def abandon(self) -> None:
        """Drop any active engine, e.g. because the operator quit.

        A scan stops at its next send. A delete keeps going until the batch
        is done; its final report is discarded.
        """
        if self.scan is not None:
            self.scan.receiver.close()
            self.scan = None
        if self.delete_run is not None:
            self.delete_run.receiver.close()
            self.delete_run = None

    # -- Navigation --

    def navigate_up(self) -> None:
        count = len(self.entries)
        if count == 0:
            return
        if self.highlighted is None:
            self.highlighted = count - 1
        else:
            self.highlighted = (self.highlighted + count - 1) % count

    def navigate_down(self) -> None:
        count = len(self.entries)
        if count == 0:
            return
        if self.highlighted is None:
            self.highlighted = 0
        else:
            self.highlighted = (self.highlighted + 1) % count

    # -- Selection --

    def toggle_selected(self) -> None:
        """Flip the highlighted entry."""
        if self.highlighted is not None and 0 <= self.highlighted < len(self.entries):
            entry = self.entries[self.highlighted]
            entry.selected = not entry.selected

    def set_selected(self, index: int, selected: bool) -> None:
        self.entries[index].selected = selected

    def toggle_all(self) -> None:
        """Select every safe entry, or deselect them all if they already are.

        Sensitive entries are left alone.
        """
        any_unselected = any(not e.sensitive and not e.selected for e in self.entries)
        for entry in self.entries:
            if not entry.sensitive:
                entry.selected = any_unselected

    def toggle_all_force(self) -> None:
        """Like :meth:`toggle_all` but including sensitive entries."""
        any_unselected = any(not e.selected for e in self.entries)
        for entry in self.entries:
            entry.selected = any_unselected

    # -- Queries --

    def selected_count(self) -> int:
        return sum(1 for e in self.entries if e.selected)

    def selected_size(self) -> int:
        return sum(e.size_bytes for e in self.entries if e.selected)

    def total_size(self) -> int:
        return sum(e.size_bytes for e in self.entries)

    def selected_paths(self) -> list[str]:
        return [e.path for e in self.entries if e.selected]

    def has_sensitive_selected(self) -> bool:
        return any(e.selected and e.sensitive for e in self.entries)

    @property
    def delete_done(self) -> int:
        return self.delete_run.done if self.delete_run else self.delete_total

    @property
    def delete_current(self) -> str:
        return self.delete_run.current if self.delete_run else ""

    def removed_count(self) -> int:
        """Directories removed by the finished delete run."""
        return self.delete_total - len(self.delete_errors)
