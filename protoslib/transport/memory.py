"""In-memory transport for development and testing.

Frames are fed by the caller instead of arriving from a socket. Every call
made by the event loop is recorded so tests can assert on the close
handshake.
"""

import asyncio
import json
from collections.abc import Mapping
from typing import Any

from protoslib.transport.base import CLOSE_NORMAL


class ConnectionClosed(Exception):
    """Raised by recv() once the in-memory connection has been closed."""


_CLOSED = object()


class InMemoryConnection:
    """Connection whose inbound frames come from feed().

    Args:
        send_close_error: If set, send_close() raises it after recording the attempt.
    """

    def __init__(self, send_close_error: BaseException | None = None) -> None:
        self._frames: asyncio.Queue[Any] = asyncio.Queue()
        self.send_close_error = send_close_error
        self.close_frames: list[tuple[int, str]] = []
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def feed(self, frame: str | bytes | Mapping[str, Any]) -> None:
        """Queue a frame for recv(). Mappings are JSON-encoded."""
        if isinstance(frame, Mapping):
            frame = json.dumps(frame)
        self._frames.put_nowait(frame)

    def fail(self, error: BaseException) -> None:
        """Make the next recv() raise error, after any frames already fed."""
        self._frames.put_nowait(error)

    async def recv(self) -> str | bytes:
        if self.closed:
            raise ConnectionClosed("connection is closed")
        item = await self._frames.get()
        if item is _CLOSED:
            raise ConnectionClosed("connection is closed")
        if isinstance(item, BaseException):
            raise item
        return item

    async def send_close(self, code: int = CLOSE_NORMAL, reason: str = "") -> None:
        self.close_frames.append((code, reason))
        if self.send_close_error is not None:
            raise self.send_close_error

    async def close(self) -> None:
        self.close_calls += 1
        self._frames.put_nowait(_CLOSED)


class InMemoryTransport:
    """Transport handing out a single InMemoryConnection.

    Args:
        connection: The connection to return. A fresh one is created if omitted.
        error: If set, connect() raises it instead of connecting.
    """

    def __init__(
        self,
        connection: InMemoryConnection | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.connection = connection or InMemoryConnection()
        self.error = error
        self.connects: list[tuple[str, dict[str, str]]] = []

    async def connect(self, url: str, headers: Mapping[str, str]) -> InMemoryConnection:
        self.connects.append((url, dict(headers)))
        if self.error is not None:
            raise self.error
        return self.connection
