"""MUD session — one TCP connection and all of its stream state."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field

from clawdwars.mud.buffer import SessionBuffer
from clawdwars.mud.errors import (
    AlreadyConnectedError,
    MudConnectionError,
    NotConnectedError,
)
from clawdwars.mud.pump import StreamPump
from clawdwars.mud.reader import PollReader
from clawdwars.mud.wake import WakeSignal

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096
LINE_TERMINATOR = "\r\n"


class ConnectionStatus(enum.Enum):
    """Lifecycle states for a MUD connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass
class MudSession:
    """A managed connection to a MUD server.

    Owns, as one unit:
    - the socket streams and the background reader task
    - the stream pump (telnet carry, UTF-8 carry, held text)
    - the session log and its read cursor
    - the wake signal used by long-polling reads

    Everything is reset together when a new connection starts. Nothing
    here retries; a failed connect leaves the session DISCONNECTED and the
    caller decides what to do next.
    """

    host: str
    port: int
    read_chunk_size: int = READ_CHUNK_SIZE

    buffer: SessionBuffer = field(default_factory=SessionBuffer)
    wake: WakeSignal = field(default_factory=WakeSignal)
    _pump: StreamPump = field(init=False)
    _poller: PollReader = field(init=False)
    _reader: asyncio.StreamReader | None = field(default=None, init=False)
    _writer: asyncio.StreamWriter | None = field(default=None, init=False)
    _reader_task: asyncio.Task | None = field(default=None, init=False)
    _status: ConnectionStatus = field(
        default=ConnectionStatus.DISCONNECTED, init=False
    )

    def __post_init__(self) -> None:
        self._pump = StreamPump(self.buffer, self.wake)
        self._poller = PollReader(self.buffer, self.wake)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self, timeout: float = 10.0, greeting_wait: float = 2.0) -> str:
        """Open the connection and return the server's greeting.

        Args:
            timeout: Seconds allowed for the TCP handshake.
            greeting_wait: Seconds to collect output after connecting.

        Raises:
            AlreadyConnectedError: The session is not disconnected.
            MudConnectionError: Timed out, the socket failed, or
                ``disconnect()`` ran before the greeting was collected.
        """
        if self._status != ConnectionStatus.DISCONNECTED:
            raise AlreadyConnectedError(
                f"Session to {self.host}:{self.port} is {self._status.value}"
            )

        self._reset_stream_state()
        self._status = ConnectionStatus.CONNECTING

        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), timeout=timeout
            )
        except asyncio.TimeoutError:
            self._status = ConnectionStatus.DISCONNECTED
            logger.warning("Connection to %s:%d timed out", self.host, self.port)
            raise MudConnectionError(
                f"Connection timed out after {timeout:g} seconds.", timed_out=True
            ) from None
        except OSError as e:
            self._status = ConnectionStatus.DISCONNECTED
            logger.warning("Connection to %s:%d failed: %s", self.host, self.port, e)
            raise MudConnectionError(f"Connection error: {e}") from e
        except asyncio.CancelledError:
            self._status = ConnectionStatus.DISCONNECTED
            raise

        if self._status != ConnectionStatus.CONNECTING:
            # disconnect() ran while the handshake was in flight
            self._close_writer()
            raise MudConnectionError("Connection cancelled by disconnect.")

        self._status = ConnectionStatus.CONNECTED
        task = self._reader_task = asyncio.create_task(self._read_loop())
        logger.info("Connected to %s:%d", self.host, self.port)

        try:
            greeting = await self._poller.collect(
                greeting_wait,
                alive=lambda: self._reader_task is task and self.connected,
            )
        except asyncio.CancelledError:
            if self._reader_task is task:
                await self._drop_connection()
                self._reset_stream_state()
            raise
        if self._reader_task is not task:
            # disconnect() ran while the greeting was being collected
            raise MudConnectionError("Connection cancelled by disconnect.")
        return greeting

    async def _read_loop(self) -> None:
        """Feed socket chunks through the pump until EOF or error."""
        reader = self._reader
        assert reader is not None
        try:
            while True:
                try:
                    data = await reader.read(self.read_chunk_size)
                except OSError as e:
                    logger.warning("Socket error on %s:%d: %s", self.host, self.port, e)
                    break
                if not data:
                    break
                self._pump.feed(data)
        except Exception:
            logger.exception("Reader for %s:%d failed", self.host, self.port)
        finally:
            self._pump.finish()
            if self._status == ConnectionStatus.CONNECTED:
                logger.info("Socket closed by %s:%d", self.host, self.port)
                self._status = ConnectionStatus.DISCONNECTED
                self._close_writer()
            # Release a long-poll blocked on a connection that is gone.
            self.wake.notify()

    async def disconnect(self) -> None:
        """Close the connection and discard the session log.

        Raises:
            NotConnectedError: There is no connection to close.
        """
        if self._status == ConnectionStatus.DISCONNECTED:
            raise NotConnectedError("Not currently connected.")

        await self._drop_connection()
        self._reset_stream_state()
        logger.info("Disconnected from %s:%d", self.host, self.port)

    async def _drop_connection(self) -> None:
        """Enter DISCONNECTED, stop the reader and release any waiter.

        The session log is left alone.
        """
        self._status = ConnectionStatus.DISCONNECTED
        self._close_writer()

        task = self._reader_task
        self._reader_task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        self.wake.notify()

    def _close_writer(self) -> None:
        writer = self._writer
        self._writer = None
        self._reader = None
        if writer is not None:
            writer.close()

    def _reset_stream_state(self) -> None:
        self.buffer.clear()
        self._pump.reset()

    # ------------------------------------------------------------------
    # I/O
    # ------------------------------------------------------------------

    async def send(self, command: str, response_wait: float = 0.5) -> str:
        """Send a command line and return the output seen shortly after.

        Args:
            command: Text to send; CRLF is appended.
            response_wait: Seconds to let the response accumulate.

        Returns:
            Everything unread after the wait, including any asynchronous
            messages that arrived alongside the response.
        """
        writer = self._require_writer()
        writer.write((command + LINE_TERMINATOR).encode("utf-8"))
        try:
            await writer.drain()
        except OSError as e:
            logger.warning("Send to %s:%d failed: %s", self.host, self.port, e)
            await self._drop_connection()
            raise MudConnectionError(f"Connection error: {e}") from e
        logger.info("Sent: %s", command)

        await asyncio.sleep(response_wait)
        response = self._poller.drain()
        logger.debug("Response: %d chars", len(response))
        return response

    async def read(self, timeout: float = 5.0) -> str:
        """Long-poll for new output. See ``PollReader.read``.

        Text left over from a connection the peer closed can still be read
        once; after that the session reports not-connected.
        """
        self._require_readable()
        logger.debug(
            "read() called. Log size: %d chars, read pos: %d",
            len(self.buffer),
            self.buffer.cursor,
        )
        return await self._poller.read(timeout)

    def drain(self) -> str:
        """Return unread output immediately."""
        self._require_readable()
        return self._poller.drain()

    def _require_writer(self) -> asyncio.StreamWriter:
        if self._status != ConnectionStatus.CONNECTED or self._writer is None:
            raise NotConnectedError("Not connected. Use mud_connect first.")
        return self._writer

    def _require_readable(self) -> None:
        if self._status == ConnectionStatus.CONNECTED:
            return
        if self.buffer.has_unread:
            return
        raise NotConnectedError("Not connected. Use mud_connect first.")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def connected(self) -> bool:
        return self._status == ConnectionStatus.CONNECTED

    @property
    def unread(self) -> int:
        return self.buffer.unread
