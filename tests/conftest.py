"""Shared fixtures: a scriptable local MUD server."""

from __future__ import annotations

import asyncio
from typing import Callable

import pytest


class FakeMud:
    """A TCP server on localhost that tests can push raw bytes through."""

    def __init__(self) -> None:
        self.greeting: bytes = b""
        self.received = bytearray()
        self._writers: list[asyncio.StreamWriter] = []
        self._server: asyncio.Server | None = None

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)

    async def stop(self) -> None:
        for writer in self._writers:
            writer.close()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()

    async def _handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self._writers.append(writer)
        if self.greeting:
            writer.write(self.greeting)
            await writer.drain()
        try:
            while True:
                data = await reader.read(1024)
                if not data:
                    break
                self.received.extend(data)
        except ConnectionError:
            pass

    @property
    def port(self) -> int:
        assert self._server is not None
        return self._server.sockets[0].getsockname()[1]

    @property
    def connections(self) -> int:
        return len(self._writers)

    async def push(self, data: bytes) -> None:
        writer = self._writers[-1]
        writer.write(data)
        await writer.drain()

    def hang_up(self) -> None:
        self._writers[-1].close()

    async def until(self, predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        """Poll until ``predicate()`` holds, failing the test after ``timeout``."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.01)


@pytest.fixture
async def fake_mud():
    mud = FakeMud()
    await mud.start()
    yield mud
    await mud.stop()


@pytest.fixture
async def closed_port() -> int:
    """A localhost port with nothing listening on it."""
    server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    server.close()
    await server.wait_closed()
    return port
