"""Telnet control-code stripping for raw MUD byte streams."""

from __future__ import annotations

IAC = 0xFF

# IAC + command + option. Subnegotiation (IAC SB ... IAC SE) is longer than
# this and is not parsed; its payload leaks through as ordinary bytes.
SEQUENCE_LENGTH = 3


def filter_telnet(data: bytes, carry: bytes = b"") -> tuple[bytes, bytes]:
    """Remove telnet negotiation sequences from a chunk.

    Args:
        data: Newly received bytes.
        carry: Unconsumed tail returned by the previous call.

    Returns:
        ``(clean, carry)``. ``clean`` holds every non-IAC byte up to the first
        sequence truncated by the end of input; ``carry`` holds that truncated
        sequence (always shorter than 3 bytes) and must be passed back in with
        the next chunk.
    """
    if carry:
        data = carry + data

    out = bytearray()
    i = 0
    n = len(data)
    while i < n:
        if data[i] == IAC:
            if i + SEQUENCE_LENGTH > n:
                return bytes(out), bytes(data[i:])
            i += SEQUENCE_LENGTH
        else:
            out.append(data[i])
            i += 1

    return bytes(out), b""
