"""Display normalization — strip terminal escapes and unify line endings."""

from __future__ import annotations

import re

# ESC [ params letter. Covers SGR colours and cursor movement, nothing more.
ANSI_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")


def strip_ansi(text: str) -> str:
    """Strip ANSI escape sequences from text.

    Repeats until nothing matches, since removing one sequence can join the
    pieces of another (``"\\x1b[1\\x1b[0mm"``).
    """
    while True:
        text, count = ANSI_RE.subn("", text)
        if not count:
            return text


def normalize_line_endings(text: str) -> str:
    """Turn CRLF and lone CR into LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def normalize_display(text: str) -> str:
    return normalize_line_endings(strip_ansi(text))
