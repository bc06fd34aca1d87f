"""Incremental UTF-8 decoding across chunk boundaries."""

from __future__ import annotations

import codecs

ENCODING = "utf-8"


class TextDecoder:
    """Stateful UTF-8 decoder.

    A multi-byte character split between two reads is held back until the
    rest of it arrives. Invalid byte sequences decode to U+FFFD instead of
    raising, so a noisy server can never stall the stream.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder(ENCODING)(errors="replace")

    def decode(self, data: bytes) -> str:
        """Decode as many complete characters as ``data`` (plus the held
        fragment) contains."""
        if not data:
            return ""
        return self._decoder.decode(data, final=False)

    def flush(self) -> str:
        """Emit whatever is held, replacing an incomplete character, and clear it."""
        return self._decoder.decode(b"", final=True)

    @property
    def pending(self) -> bytes:
        """Bytes of the incomplete character currently held."""
        buffered, _ = self._decoder.getstate()
        return bytes(buffered)

    def reset(self) -> None:
        self._decoder.reset()
