"""Tests for clawdwars.mud.session.MudSession against a local server."""

from __future__ import annotations

import asyncio

import pytest

from clawdwars.mud.errors import (
    AlreadyConnectedError,
    MudConnectionError,
    NotConnectedError,
)
from clawdwars.mud.session import ConnectionStatus, MudSession


async def _connect(fake_mud, greeting_wait: float = 0.1) -> MudSession:
    session = MudSession(host="127.0.0.1", port=fake_mud.port)
    await session.connect(timeout=2.0, greeting_wait=greeting_wait)
    return session


# ---------------------------------------------------------------------------
# Connect / disconnect
# ---------------------------------------------------------------------------


class TestConnect:
    async def test_greeting_is_cleaned(self, fake_mud) -> None:
        fake_mud.greeting = b"\xff\xfb\x01\x1b[1;32mWelcome\x1b[0m\r\nName: "
        session = MudSession(host="127.0.0.1", port=fake_mud.port)
        greeting = await session.connect(timeout=2.0, greeting_wait=0.3)
        assert greeting == "Welcome\nName: "
        assert session.status is ConnectionStatus.CONNECTED
        assert session.unread == 0
        await session.disconnect()

    async def test_no_greeting(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        assert session.connected is True
        await session.disconnect()

    async def test_refused(self, closed_port) -> None:
        session = MudSession(host="127.0.0.1", port=closed_port)
        with pytest.raises(MudConnectionError) as excinfo:
            await session.connect(timeout=2.0, greeting_wait=0)
        assert excinfo.value.timed_out is False
        assert str(excinfo.value).startswith("Connection error:")
        assert session.status is ConnectionStatus.DISCONNECTED

    async def test_timeout(self, monkeypatch) -> None:
        async def never_connects(*args, **kwargs):
            await asyncio.sleep(10)

        monkeypatch.setattr(asyncio, "open_connection", never_connects)
        session = MudSession(host="192.0.2.1", port=4000)
        with pytest.raises(MudConnectionError) as excinfo:
            await session.connect(timeout=0.05, greeting_wait=0)
        assert excinfo.value.timed_out is True
        assert str(excinfo.value) == "Connection timed out after 0.05 seconds."
        assert session.status is ConnectionStatus.DISCONNECTED

    async def test_already_connected(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        with pytest.raises(AlreadyConnectedError):
            await session.connect(timeout=2.0, greeting_wait=0)
        assert session.connected is True
        await session.disconnect()

    async def test_disconnect_resets(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        await fake_mud.push(b"unread text")
        await fake_mud.until(lambda: session.unread > 0)
        await session.disconnect()
        assert session.status is ConnectionStatus.DISCONNECTED
        assert len(session.buffer) == 0
        assert session.buffer.cursor == 0

    async def test_disconnect_when_not_connected(self) -> None:
        session = MudSession(host="127.0.0.1", port=1)
        with pytest.raises(NotConnectedError):
            await session.disconnect()

    async def test_cancelled_handshake_returns_to_disconnected(
        self, monkeypatch
    ) -> None:
        async def never_connects(*args, **kwargs):
            await asyncio.sleep(10)

        monkeypatch.setattr(asyncio, "open_connection", never_connects)
        session = MudSession(host="192.0.2.1", port=4000)
        task = asyncio.create_task(session.connect(timeout=5.0, greeting_wait=0))
        await asyncio.sleep(0.02)
        assert session.status is ConnectionStatus.CONNECTING
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert session.status is ConnectionStatus.DISCONNECTED

    async def test_cancelled_greeting_closes_connection(self, fake_mud) -> None:
        session = MudSession(host="127.0.0.1", port=fake_mud.port)
        task = asyncio.create_task(session.connect(timeout=2.0, greeting_wait=5.0))
        await fake_mud.until(lambda: session.connected)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert session.status is ConnectionStatus.DISCONNECTED
        await session.connect(timeout=2.0, greeting_wait=0)
        assert session.connected is True
        await session.disconnect()

    async def test_disconnect_during_handshake(self, fake_mud, monkeypatch) -> None:
        real_open = asyncio.open_connection

        async def slow_open(*args, **kwargs):
            await asyncio.sleep(0.1)
            return await real_open(*args, **kwargs)

        monkeypatch.setattr(asyncio, "open_connection", slow_open)
        session = MudSession(host="127.0.0.1", port=fake_mud.port)
        task = asyncio.create_task(session.connect(timeout=2.0, greeting_wait=0))
        await asyncio.sleep(0.02)
        assert session.status is ConnectionStatus.CONNECTING
        await session.disconnect()
        with pytest.raises(MudConnectionError, match="cancelled by disconnect"):
            await task
        assert session.status is ConnectionStatus.DISCONNECTED

    async def test_disconnect_during_greeting(self, fake_mud) -> None:
        session = MudSession(host="127.0.0.1", port=fake_mud.port)
        loop = asyncio.get_running_loop()
        task = asyncio.create_task(session.connect(timeout=2.0, greeting_wait=5.0))
        await fake_mud.until(lambda: session.connected)
        start = loop.time()
        await session.disconnect()
        with pytest.raises(MudConnectionError, match="cancelled by disconnect"):
            await task
        assert loop.time() - start < 1.0
        assert session.status is ConnectionStatus.DISCONNECTED

    async def test_peer_close_during_greeting_keeps_text(self, fake_mud) -> None:
        fake_mud.greeting = b"Server full.\r\n"
        session = MudSession(host="127.0.0.1", port=fake_mud.port)
        task = asyncio.create_task(session.connect(timeout=2.0, greeting_wait=5.0))
        await fake_mud.until(lambda: session.connected)
        await fake_mud.until(lambda: fake_mud.connections == 1)
        fake_mud.hang_up()
        assert await asyncio.wait_for(task, timeout=2.0) == "Server full.\n"
        assert session.connected is False

    async def test_reconnect_starts_fresh(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        await fake_mud.push(b"first life\xff")
        await fake_mud.until(lambda: session.unread > 0)
        await session.disconnect()

        fake_mud.greeting = b"\xfb\x01again"
        greeting = await session.connect(timeout=2.0, greeting_wait=0.2)
        # No stale telnet carry: the leading bytes are not treated as IAC tail
        assert greeting == "�\x01again"
        assert fake_mud.connections == 2
        await session.disconnect()


# ---------------------------------------------------------------------------
# Send / read
# ---------------------------------------------------------------------------


class TestIO:
    async def test_send_appends_crlf(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        await session.send("look", response_wait=0)
        await fake_mud.until(lambda: bytes(fake_mud.received) == b"look\r\n")
        await session.disconnect()

    async def test_send_returns_response(self, fake_mud) -> None:
        session = await _connect(fake_mud)

        async def reply() -> None:
            await fake_mud.until(lambda: b"score" in fake_mud.received)
            await fake_mud.push(b"You have 10 hp.\r\n")

        task = asyncio.create_task(reply())
        response = await session.send("score", response_wait=0.3)
        await task
        assert response == "You have 10 hp.\n"
        await session.disconnect()

    async def test_send_failure_disconnects(self, fake_mud, monkeypatch) -> None:
        session = await _connect(fake_mud)

        async def broken_drain() -> None:
            raise ConnectionResetError("reset by peer")

        monkeypatch.setattr(session._writer, "drain", broken_drain)
        with pytest.raises(MudConnectionError, match="reset by peer"):
            await session.send("look", response_wait=0)
        assert session.status is ConnectionStatus.DISCONNECTED
        with pytest.raises(NotConnectedError):
            await session.send("look")

        await session.connect(timeout=2.0, greeting_wait=0)
        assert session.connected is True
        await session.disconnect()

    async def test_read_waits_for_data(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        loop = asyncio.get_running_loop()

        async def later() -> None:
            await asyncio.sleep(0.05)
            await fake_mud.push(b"A goblin arrives.\r\n")

        task = asyncio.create_task(later())
        start = loop.time()
        text = await session.read(timeout=5.0)
        await task
        assert text == "A goblin arrives.\n"
        assert loop.time() - start < 2.0
        await session.disconnect()

    async def test_read_immediate_when_unread(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        await fake_mud.push(b"queued")
        await fake_mud.until(lambda: session.unread > 0)
        loop = asyncio.get_running_loop()
        start = loop.time()
        assert await session.read(timeout=5.0) == "queued"
        assert loop.time() - start < 0.5
        await session.disconnect()

    async def test_read_times_out_empty(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        loop = asyncio.get_running_loop()
        start = loop.time()
        assert await session.read(timeout=0.3) == ""
        assert loop.time() - start >= 0.27
        await session.disconnect()

    async def test_drain(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        await fake_mud.push(b"a\r\nb")
        await fake_mud.until(lambda: session.unread == 3)
        assert session.drain() == "a\nb"
        assert session.drain() == ""
        await session.disconnect()

    async def test_split_packets_decode_once(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        euro = "€".encode()
        await fake_mud.push(b"\xff")
        await asyncio.sleep(0.02)
        await fake_mud.push(b"\xfb\x01" + euro[:1])
        await asyncio.sleep(0.02)
        await fake_mud.push(euro[1:] + b"!")
        await fake_mud.until(lambda: session.unread == 2)
        assert session.drain() == "€!"
        await session.disconnect()

    async def test_operations_need_connection(self) -> None:
        session = MudSession(host="127.0.0.1", port=1)
        with pytest.raises(NotConnectedError):
            await session.send("look")
        with pytest.raises(NotConnectedError):
            await session.read(timeout=0.01)
        with pytest.raises(NotConnectedError):
            session.drain()
        assert session.status is ConnectionStatus.DISCONNECTED


# ---------------------------------------------------------------------------
# Peer hang-up and waiter release
# ---------------------------------------------------------------------------


class TestClose:
    async def test_peer_close_flushes_and_disconnects(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        await fake_mud.push(b"Goodbye!\r")
        fake_mud.hang_up()
        await fake_mud.until(lambda: not session.connected)

        assert session.status is ConnectionStatus.DISCONNECTED
        # Held CR is flushed at end of stream
        assert await session.read(timeout=1.0) == "Goodbye!\n"
        with pytest.raises(NotConnectedError):
            await session.read(timeout=0.01)
        with pytest.raises(NotConnectedError):
            await session.send("look")

    async def test_peer_close_releases_pending_read(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        loop = asyncio.get_running_loop()
        loop.call_later(0.05, fake_mud.hang_up)
        start = loop.time()
        assert await session.read(timeout=5.0) == ""
        assert loop.time() - start < 2.0
        assert session.connected is False

    async def test_disconnect_releases_pending_read(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        loop = asyncio.get_running_loop()
        read_task = asyncio.create_task(session.read(timeout=5.0))
        await asyncio.sleep(0.05)
        start = loop.time()
        await session.disconnect()
        assert await read_task == ""
        assert loop.time() - start < 1.0

    async def test_connect_after_peer_close(self, fake_mud) -> None:
        session = await _connect(fake_mud)
        fake_mud.hang_up()
        await fake_mud.until(lambda: not session.connected)
        await session.connect(timeout=2.0, greeting_wait=0)
        assert session.connected is True
        await session.disconnect()
