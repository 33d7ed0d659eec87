"""Exception types raised by the nodenuke core."""

from __future__ import annotations


class NodeNukeError(Exception):
    """Base class for nodenuke errors."""


class ChannelClosed(NodeNukeError):
    """Raised when sending on a channel whose receiver has been closed."""


class InvalidTransition(NodeNukeError):
    """Raised when a coordinator operation is invoked in the wrong phase."""
