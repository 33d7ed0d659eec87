"""One-way message channel between a worker thread and the coordinator.

A thin wrapper around :class:`queue.Queue` that adds the one thing the
queue lacks: knowing when the other side has gone away. Closing the
receiver makes every later :meth:`Sender.send` raise
:class:`~nodenuke.errors.ChannelClosed`, which workers use as a
cancellation signal. Closing the sender lets the receiver tell "nothing
yet" apart from "nothing ever again".
"""

from __future__ import annotations

import queue
import threading
from typing import Generic, TypeVar

from nodenuke.errors import ChannelClosed

T = TypeVar("T")


class _State(Generic[T]):
    def __init__(self) -> None:
        self.queue: queue.Queue[T] = queue.Queue()
        self.receiver_closed = threading.Event()
        self.sender_closed = threading.Event()


class Sender(Generic[T]):
    """Producer end. Owned by exactly one worker thread."""

    def __init__(self, state: _State[T]) -> None:
        self._state = state

    @property
    def closed(self) -> bool:
        """Whether the receiving side has been closed."""
        return self._state.receiver_closed.is_set()

    def send(self, msg: T) -> None:
        """Queue *msg* for the receiver.

        Raises:
            ChannelClosed: If the receiver has been closed.
        """
        if self._state.receiver_closed.is_set():
            raise ChannelClosed("receiver closed")
        self._state.queue.put(msg)

    def close(self) -> None:
        self._state.sender_closed.set()

    def __enter__(self) -> Sender[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class Receiver(Generic[T]):
    """Consumer end. Owned by the coordinator thread."""

    def __init__(self, state: _State[T]) -> None:
        self._state = state

    @property
    def closed(self) -> bool:
        return self._state.receiver_closed.is_set()

    @property
    def disconnected(self) -> bool:
        """True once the sender is gone and every queued message was read."""
        return self._state.sender_closed.is_set() and self._state.queue.empty()

    def try_recv(self) -> T | None:
        """Return the next message, or None if nothing is queued right now.

        Never blocks. Always returns None after :meth:`close`.
        """
        if self._state.receiver_closed.is_set():
            return None
        try:
            return self._state.queue.get_nowait()
        except queue.Empty:
            return None

    def recv(self, timeout: float | None = None) -> T | None:
        """Block up to *timeout* seconds for the next message.

        For consumers that wait on one engine, such as a headless drain.
        The coordinator polls with :meth:`try_recv` instead.
        """
        if self._state.receiver_closed.is_set():
            return None
        try:
            return self._state.queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self) -> None:
        """Abandon the channel. Pending and future messages are dropped."""
        self._state.receiver_closed.set()
        while True:
            try:
                self._state.queue.get_nowait()
            except queue.Empty:
                break


def channel() -> tuple[Sender[T], Receiver[T]]:
    """Create a connected (sender, receiver) pair."""
    state: _State[T] = _State()
    return Sender(state), Receiver(state)
