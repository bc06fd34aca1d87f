"""Wake-now signal for long-polling readers."""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class WakeSignal:
    """Single-waiter wake signal.

    ``notify()`` resolves the future of whichever waiter is registered right
    now. If nobody is waiting the notification is dropped, not queued: the
    reader checks the buffer before it registers, so a notification it
    missed only ever concerns text it is about to drain anyway.

    Loop-confined. ``register()``, ``notify()`` and ``wait_until()`` must
    all run on the event loop that owns the session.
    """

    def __init__(self) -> None:
        self._waiter: asyncio.Future[None] | None = None

    def register(self) -> asyncio.Future[None]:
        """Register the current waiter and return its future.

        Only one waiter is supported. A waiter that is still pending when a
        new one registers is woken so it cannot hang.
        """
        if self._waiter is not None and not self._waiter.done():
            logger.debug("Replacing pending waiter; waking the old one")
            self._waiter.set_result(None)
        self._waiter = asyncio.get_running_loop().create_future()
        return self._waiter

    def notify(self) -> bool:
        """Wake the pending waiter, if any. Returns True if one was woken."""
        waiter = self._waiter
        if waiter is None or waiter.done():
            return False
        waiter.set_result(None)
        return True

    async def wait(self, future: asyncio.Future[None], timeout: float) -> bool:
        """Wait on a future from ``register()``.

        Returns True if woken, False on timeout. The waiter is unregistered
        either way.
        """
        try:
            await asyncio.wait_for(asyncio.shield(future), timeout=max(timeout, 0))
            return True
        except asyncio.TimeoutError:
            return False
        finally:
            if self._waiter is future:
                self._waiter = None

    async def wait_until(self, deadline: float) -> bool:
        """Register and wait until notified or ``deadline`` (loop time) passes."""
        future = self.register()
        loop = asyncio.get_running_loop()
        return await self.wait(future, deadline - loop.time())

    @property
    def has_waiter(self) -> bool:
        return self._waiter is not None and not self._waiter.done()
