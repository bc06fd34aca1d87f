"""Stream pump — the per-chunk pipeline from socket bytes to session text."""

from __future__ import annotations

import logging
import re

from clawdwars.mud.buffer import SessionBuffer
from clawdwars.mud.decoder import TextDecoder
from clawdwars.mud.normalize import normalize_line_endings, strip_ansi
from clawdwars.mud.telnet import filter_telnet
from clawdwars.mud.wake import WakeSignal

logger = logging.getLogger(__name__)

# Tail of already-stripped text that the next chunk could still change: a CR
# that may turn out to be half of a CRLF, and escape-sequence prefixes that
# are not terminated yet.
_HOLD_RE = re.compile(r"\r?(?:\x1b(?:\[[0-9;]*)?)*\Z")

# Longer unterminated tails are passed through as-is rather than held forever.
MAX_HELD_CHARS = 32

PREVIEW_CHARS = 100


class StreamPump:
    """Turns raw socket chunks into normalized text in a SessionBuffer.

    Each chunk goes through, in order:

    1. telnet filtering (IAC sequences removed, a truncated one carried over)
    2. incremental UTF-8 decoding (a split character carried over)
    3. escape stripping and line-ending normalization
    4. ``buffer.append()`` followed by ``wake.notify()``

    The text reaching the buffer is the same however the byte stream was
    chunked. To keep that true for CRLF pairs and escape sequences that
    straddle a boundary, a trailing CR or unterminated ``ESC [`` prefix is
    held back until the next chunk or ``finish()``.
    """

    def __init__(self, buffer: SessionBuffer, wake: WakeSignal) -> None:
        self.buffer = buffer
        self.wake = wake
        self._decoder = TextDecoder()
        self._control_carry: bytes = b""
        self._held_text: str = ""

    def feed(self, chunk: bytes) -> str:
        """Process one inbound chunk. Returns the text appended (may be empty)."""
        if not chunk:
            return ""

        cleaned, self._control_carry = filter_telnet(chunk, self._control_carry)
        text = self._decoder.decode(cleaned)
        if not text:
            return ""

        stripped = strip_ansi(self._held_text + text)
        hold_at = _HOLD_RE.search(stripped).start()  # type: ignore[union-attr]
        if len(stripped) - hold_at > MAX_HELD_CHARS:
            logger.debug(
                "Releasing %d-char unterminated escape tail",
                len(stripped) - hold_at,
            )
            hold_at = len(stripped)
        self._held_text = stripped[hold_at:]
        return self._emit(normalize_line_endings(stripped[:hold_at]))

    def finish(self) -> str:
        """Flush everything still held at end of stream.

        An unfinished telnet sequence is dropped. An incomplete UTF-8
        character becomes U+FFFD.
        """
        if self._control_carry:
            logger.debug(
                "Dropping %d-byte partial telnet sequence at end of stream",
                len(self._control_carry),
            )
        text = self._held_text + self._decoder.flush()
        self._control_carry = b""
        self._held_text = ""
        return self._emit(normalize_line_endings(strip_ansi(text)))

    def _emit(self, processed: str) -> str:
        if not processed:
            return ""
        logger.debug("Processed text: %d chars", len(processed))
        logger.debug(
            "Preview: %s", processed[:PREVIEW_CHARS].replace("\n", "\\n")
        )
        self.buffer.append(processed)
        self.wake.notify()
        return processed

    @property
    def control_carry(self) -> bytes:
        return self._control_carry

    @property
    def pending_bytes(self) -> bytes:
        """Bytes of a split UTF-8 character awaiting the rest of it."""
        return self._decoder.pending

    def reset(self) -> None:
        """Forget all carried fragments (new connection)."""
        self._decoder.reset()
        self._control_carry = b""
        self._held_text = ""
