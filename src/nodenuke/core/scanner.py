"""Background discovery of target directories."""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from nodenuke.core.channel import Receiver, Sender, channel
from nodenuke.core.classifier import is_sensitive_dir
from nodenuke.errors import ChannelClosed
from nodenuke.models.messages import ScanDone, ScanFound, ScanMessage
from nodenuke.utils import dir_size

log = logging.getLogger(__name__)

DEFAULT_TARGET_NAME = "node_modules"
DEFAULT_WORKERS = 4


class SharedPath:
    """The directory the scan is visiting right now.

    Written by scan threads, polled by the coordinator. Neither side ever
    waits on the lock: a busy lock means "no update this time".
    """

    def __init__(self, value: str = "") -> None:
        self._lock = threading.Lock()
        self._value = value

    def set(self, value: str) -> None:
        if self._lock.acquire(blocking=False):
            try:
                self._value = value
            finally:
                self._lock.release()

    def try_get(self) -> str | None:
        """Return the current value, or None if the lock is held."""
        if not self._lock.acquire(blocking=False):
            return None
        try:
            return self._value
        finally:
            self._lock.release()


@dataclass
class ScanHandle:
    """One in-flight or finished scan."""

    receiver: Receiver[ScanMessage]
    current_path: SharedPath = field(default_factory=SharedPath)
    done: bool = False
    thread: threading.Thread | None = None


def start_scan(
    root: str,
    target_name: str = DEFAULT_TARGET_NAME,
    workers: int = DEFAULT_WORKERS,
) -> ScanHandle:
    """Start scanning *root* for directories named *target_name*.

    Returns immediately. The walk runs on a daemon thread that streams a
    :class:`ScanFound` per match and finally one :class:`ScanDone`.
    Matches are never descended into, so a nested match inside a reported
    one is never reported. Closing the handle's receiver stops the walk.
    """
    sender, receiver = channel()
    handle = ScanHandle(receiver=receiver)
    handle.thread = threading.Thread(
        target=_scan_worker,
        args=(os.path.abspath(root), sender, handle.current_path, target_name, max(1, workers)),
        name="nodenuke-scan",
        daemon=True,
    )
    handle.thread.start()
    return handle


def _scan_worker(
    root: str,
    sender: Sender[ScanMessage],
    current_path: SharedPath,
    target_name: str,
    workers: int,
) -> None:
    """Walk *root* on a pool and publish results from this thread only.

    Pool threads read directories and measure matches. Only this thread
    calls ``sender.send``, which keeps ScanDone behind every ScanFound.
    """
    log.info("Scan started: %s (looking for %s)", root, target_name)
    cancelled = threading.Event()
    found = 0

    def read(path: str) -> Future:
        return pool.submit(_read_dir, path, target_name, current_path, cancelled)

    def measure(path: str) -> Future:
        return pool.submit(_measure, path, current_path, cancelled)

    with sender:
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="nodenuke-walk")
        pending: set[Future] = {read(root)}
        try:
            while pending:
                if sender.closed:
                    raise ChannelClosed("receiver closed")
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    result = future.result()
                    if result is None:
                        continue
                    if isinstance(result, ScanFound):
                        sender.send(result)
                        found += 1
                        continue
                    subdirs, matches = result
                    pending.update(measure(p) for p in matches)
                    pending.update(read(p) for p in subdirs)
            sender.send(ScanDone())
            log.info("Scan finished: %d match(es) under %s", found, root)
        except ChannelClosed:
            log.debug("Scan of %s abandoned after %d match(es)", root, found)
        finally:
            cancelled.set()
            pool.shutdown(wait=False, cancel_futures=True)


def _read_dir(
    path: str,
    target_name: str,
    current_path: SharedPath,
    cancelled: threading.Event,
) -> tuple[list[str], list[str]]:
    """List one directory. Returns (subdirectories to walk, matches)."""
    if cancelled.is_set():
        return [], []
    current_path.set(path)

    subdirs: list[str] = []
    matches: list[str] = []
    try:
        with os.scandir(path) as it:
            for entry in it:
                try:
                    if not entry.is_dir(follow_symlinks=False):
                        continue
                except OSError:
                    continue
                if entry.name == target_name:
                    matches.append(entry.path)
                else:
                    subdirs.append(entry.path)
    except OSError:
        log.debug("Cannot read directory: %s", path)
    return subdirs, matches


def _measure(path: str, current_path: SharedPath, cancelled: threading.Event) -> ScanFound | None:
    if cancelled.is_set():
        return None
    current_path.set(path)
    try:
        last_modified: int | None = int(os.stat(path).st_mtime)
    except (OSError, OverflowError, ValueError):
        last_modified = None
    return ScanFound(
        path=path,
        size_bytes=dir_size(path, cancelled),
        sensitive=is_sensitive_dir(path),
        last_modified=last_modified,
    )
