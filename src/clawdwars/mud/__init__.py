"""MUD connection core — telnet byte stream in, clean text out.

Raw socket chunks are filtered of telnet negotiation, decoded as UTF-8,
stripped of ANSI escapes and line-normalized, then accumulated in a
session log that consumers drain or long-poll.
"""

from clawdwars.mud.buffer import SessionBuffer
from clawdwars.mud.decoder import TextDecoder
from clawdwars.mud.errors import (
    AlreadyConnectedError,
    MudConnectionError,
    MudError,
    NotConnectedError,
)
from clawdwars.mud.normalize import normalize_display, normalize_line_endings, strip_ansi
from clawdwars.mud.pump import StreamPump
from clawdwars.mud.reader import PollReader
from clawdwars.mud.session import ConnectionStatus, MudSession
from clawdwars.mud.telnet import filter_telnet
from clawdwars.mud.wake import WakeSignal

__all__ = [
    "SessionBuffer",
    "TextDecoder",
    "MudError",
    "MudConnectionError",
    "NotConnectedError",
    "AlreadyConnectedError",
    "normalize_display",
    "normalize_line_endings",
    "strip_ansi",
    "StreamPump",
    "PollReader",
    "ConnectionStatus",
    "MudSession",
    "filter_telnet",
    "WakeSignal",
]
