"""Append-only session log with a single read cursor."""

from __future__ import annotations

import threading


class SessionBuffer:
    """Thread-safe accumulator for normalized MUD output.

    Text is never removed from the log during a connection. A cursor marks
    the boundary between text already handed to a consumer and text that
    is still unread:

    * ``append()`` extends the log.
    * ``drain()`` returns everything past the cursor and moves the cursor
      to the end, in one step under the lock.

    Two drains never overlap, and every appended character comes back from
    exactly one drain. The cursor only moves forward; ``clear()`` is the one
    place it goes back to zero, together with the log.
    """

    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._length: int = 0
        self._cursor: int = 0
        self._lock = threading.Lock()

    def append(self, text: str) -> None:
        """Append text to the log. Empty strings are ignored."""
        if not text:
            return
        with self._lock:
            self._chunks.append(text)
            self._length += len(text)

    def drain(self) -> str:
        """Return unread text and mark it read."""
        with self._lock:
            if self._cursor == self._length:
                return ""
            log = self._join()
            text = log[self._cursor :]
            self._cursor = self._length
            return text

    def read_all(self) -> str:
        """The whole log, read and unread, without moving the cursor."""
        with self._lock:
            return self._join()

    def _join(self) -> str:
        # Collapse the chunk list so repeated drains stay linear. Lock held.
        if len(self._chunks) > 1:
            self._chunks = ["".join(self._chunks)]
        return self._chunks[0] if self._chunks else ""

    @property
    def cursor(self) -> int:
        with self._lock:
            return self._cursor

    @property
    def unread(self) -> int:
        """Number of characters appended but not yet drained."""
        with self._lock:
            return self._length - self._cursor

    @property
    def has_unread(self) -> bool:
        return self.unread > 0

    def __len__(self) -> int:
        with self._lock:
            return self._length

    def clear(self) -> None:
        """Reset log and cursor. Only used on a new connection or disconnect."""
        with self._lock:
            self._chunks.clear()
            self._length = 0
            self._cursor = 0
