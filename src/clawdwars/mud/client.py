"""MudClient — the one live MUD session shared by the tools."""

from __future__ import annotations

import logging

from clawdwars.config import MudConfig
from clawdwars.mud.errors import AlreadyConnectedError, NotConnectedError
from clawdwars.mud.session import MudSession

logger = logging.getLogger(__name__)


class MudClient:
    """Holds at most one MudSession and applies the configured timings.

    A session whose peer hung up stays around until the next connect so its
    last output can still be read.
    """

    def __init__(self, settings: MudConfig | None = None) -> None:
        self.settings = settings or MudConfig()
        self.session: MudSession | None = None

    async def connect(self, host: str, port: int) -> str:
        """Connect and return the greeting.

        Raises:
            AlreadyConnectedError: A session is already connected.
            MudConnectionError: The connection failed.
        """
        if self.session is not None and self.session.connected:
            raise AlreadyConnectedError(
                "Already connected. Disconnect first with mud_disconnect."
            )

        self.session = MudSession(
            host=host, port=port, read_chunk_size=self.settings.read_chunk_size
        )
        try:
            return await self.session.connect(
                timeout=self.settings.connect_timeout,
                greeting_wait=self.settings.greeting_wait,
            )
        except Exception:
            self.session = None
            raise

    async def send(self, command: str) -> str:
        return await self._require_session().send(
            command, response_wait=self.settings.response_wait
        )

    async def read(self, timeout: float | None = None) -> str:
        if timeout is None:
            timeout = self.settings.read_timeout
        return await self._require_session().read(timeout)

    async def disconnect(self) -> None:
        session = self.session
        if session is None or not session.connected:
            raise NotConnectedError("Not currently connected.")
        await session.disconnect()
        self.session = None

    def _require_session(self) -> MudSession:
        if self.session is None:
            raise NotConnectedError("Not connected. Use mud_connect first.")
        return self.session

    @property
    def connected(self) -> bool:
        return self.session is not None and self.session.connected
