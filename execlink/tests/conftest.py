from __future__ import annotations

import asyncio
import socket
import zlib
from typing import List

import pytest
import pytest_asyncio


class RecordingBackend:
    """Loopback listener that reads each connection to EOF and never replies."""

    def __init__(self) -> None:
        self.connections = 0
        self.payloads: List[bytes] = []
        self.received = asyncio.Event()
        self.server: asyncio.AbstractServer | None = None
        self.port = 0

    async def start(self) -> "RecordingBackend":
        self.server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self.server.sockets[0].getsockname()[1]
        return self

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.connections += 1
        try:
            data = await reader.read()
        except ConnectionError:
            data = b""
        self.payloads.append(data)
        self.received.set()
        writer.close()

    async def wait_payload(self, timeout: float = 2.0) -> bytes:
        await asyncio.wait_for(self.received.wait(), timeout)
        return self.payloads[-1]

    async def stop(self) -> None:
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()


@pytest_asyncio.fixture
async def backend():
    srv = await RecordingBackend().start()
    try:
        yield srv
    finally:
        await srv.stop()


@pytest.fixture
def closed_port() -> int:
    """A loopback port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def backlog_listener():
    """Blocking listener that never accepts; the kernel backlog completes connects."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(8)
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


async def _never_connects(host: str, port: int):
    await asyncio.sleep(3600)
    raise AssertionError("unreachable")


@pytest.fixture
def hanging_connector():
    """Stream opener that never completes, standing in for a blackholed connect."""
    return _never_connects


class SpyEncoder:
    def __init__(self) -> None:
        self.calls: List[bytes] = []

    def encode(self, data: bytes) -> bytes:
        self.calls.append(data)
        return zlib.compress(data)


@pytest.fixture
def spy_encoder() -> SpyEncoder:
    return SpyEncoder()
