"""Errors raised by MUD sessions.

Malformed UTF-8 and garbled telnet bytes are recovered inside the stream
pipeline and never show up here. These exceptions cover the two things a
caller has to react to: the transport failed, or the call was made in the
wrong connection state.
"""

from __future__ import annotations


class MudError(Exception):
    """Base class for MUD session errors."""


class MudConnectionError(MudError):
    """The TCP connection could not be established or failed mid-stream."""

    def __init__(self, message: str, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out


class NotConnectedError(MudError):
    """An operation that needs a live connection was called while disconnected."""


class AlreadyConnectedError(MudError):
    """connect() was called on a session that is already connected."""
