"""Background removal of selected directories."""

from __future__ import annotations

import logging
import shutil
import threading

from nodenuke.core.channel import Receiver, Sender, channel
from nodenuke.errors import ChannelClosed
from nodenuke.models.messages import DeleteDone, DeleteMessage, DeleteProgress
from nodenuke.utils import dir_size

log = logging.getLogger(__name__)


def start_delete(paths: list[str]) -> Receiver[DeleteMessage]:
    """Start removing *paths* one after another on a worker thread.

    Returns the receiving end immediately. The worker sends a
    :class:`DeleteProgress` before each attempt and one :class:`DeleteDone`
    at the end. Closing the receiver does not stop the batch.
    """
    sender, receiver = channel()
    threading.Thread(
        target=_delete_worker,
        args=(list(paths), sender),
        name="nodenuke-delete",
        daemon=False,
    ).start()
    return receiver


def _send(sender: Sender[DeleteMessage], msg: DeleteMessage) -> None:
    try:
        sender.send(msg)
    except ChannelClosed:
        pass


def _delete_worker(paths: list[str], sender: Sender[DeleteMessage]) -> None:
    log.info("Deleting %d director%s", len(paths), "y" if len(paths) == 1 else "ies")
    freed = 0
    errors: list[str] = []

    with sender:
        for path in paths:
            _send(sender, DeleteProgress(path))
            size = dir_size(path)
            try:
                shutil.rmtree(path)
            except OSError as e:
                log.warning("Failed to delete %s: %s", path, e)
                errors.append(f"{path}: {e}")
            else:
                freed += size
                log.debug("Deleted %s (%d bytes)", path, size)

        if sender.closed:
            log.debug("Delete report dropped, receiver closed")
        _send(sender, DeleteDone(freed_bytes=freed, errors=errors))

    log.info("Delete finished: %d bytes freed, %d error(s)", freed, len(errors))
