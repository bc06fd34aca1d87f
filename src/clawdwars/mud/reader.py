"""Poll reader — immediate drain or bounded long-poll."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from clawdwars.mud.buffer import SessionBuffer
from clawdwars.mud.wake import WakeSignal

logger = logging.getLogger(__name__)


class PollReader:
    """Consumer side of a session's output.

    Only one ``read()`` may be outstanding per session at a time. This is a
    precondition of callers, not something the reader enforces.
    """

    def __init__(self, buffer: SessionBuffer, wake: WakeSignal) -> None:
        self.buffer = buffer
        self.wake = wake

    def drain(self) -> str:
        """Return unread text now, without waiting."""
        return self.buffer.drain()

    async def read(self, timeout: float) -> str:
        """Return unread text, waiting up to ``timeout`` seconds for some.

        Returns immediately when text is already waiting. Otherwise blocks
        until the pump appends something or the timeout expires, then drains
        once. An empty result means nothing arrived in the window.
        """
        # No await between the check and register(): the pump runs on the
        # same loop, so it cannot append in between.
        if self.buffer.has_unread:
            text = self.buffer.drain()
            logger.debug("read() returning immediately: %d chars", len(text))
            return text

        future = self.wake.register()
        logger.debug("Buffer empty, waiting up to %.1fs for data", timeout)
        woke = await self.wake.wait(future, timeout)

        text = self.buffer.drain()
        logger.debug(
            "read() returning after %s: %d chars",
            "wake" if woke else "timeout",
            len(text),
        )
        return text

    async def collect(
        self, duration: float, alive: Callable[[], bool] | None = None
    ) -> str:
        """Gather everything that arrives during ``duration`` seconds.

        Unlike ``read()`` this keeps waiting after the first wake, so a
        greeting sent in several packets comes back in one piece. Stops
        early once ``alive()`` turns false.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + duration
        parts = [self.buffer.drain()]
        while alive is None or alive():
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            parts.append(await self.read(remaining))
        else:
            parts.append(self.buffer.drain())
        return "".join(parts)
