"""Websocket transport built on the ``websockets`` asyncio client."""

import logging
from collections.abc import Mapping

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import InvalidStatus

from protoslib.core.errors import (
    ConnectionFailedError,
    ConnectionRejectedError,
    decode_error_body,
)
from protoslib.transport.base import CLOSE_NORMAL

logger = logging.getLogger("protoslib.transport.websocket")


class WebSocketConnection:
    """Connection wrapper around a websockets ClientConnection."""

    def __init__(self, ws: ClientConnection) -> None:
        self._ws = ws

    async def recv(self) -> str | bytes:
        return await self._ws.recv()

    async def send_close(self, code: int = CLOSE_NORMAL, reason: str = "") -> None:
        # Runs the closing handshake; raises if the socket is already broken.
        await self._ws.close(code=code, reason=reason)

    async def close(self) -> None:
        transport = self._ws.transport
        if transport is not None and not transport.is_closing():
            transport.abort()
        logger.debug("Closed websocket connection")


class WebSocketTransport:
    """Opens websocket connections to Protos.

    Args:
        open_timeout: Seconds allowed for the opening handshake.
        close_timeout: Seconds to wait for the peer during the closing handshake.
        ping_interval: Keepalive ping period in seconds, None to disable.
    """

    def __init__(
        self,
        open_timeout: float = 10.0,
        close_timeout: float = 5.0,
        ping_interval: float | None = 30.0,
    ) -> None:
        self.open_timeout = open_timeout
        self.close_timeout = close_timeout
        self.ping_interval = ping_interval

    async def connect(self, url: str, headers: Mapping[str, str]) -> WebSocketConnection:
        try:
            ws = await connect(
                url,
                additional_headers=dict(headers),
                open_timeout=self.open_timeout,
                close_timeout=self.close_timeout,
                ping_interval=self.ping_interval,
            )
        except InvalidStatus as e:
            message = decode_error_body(e.response.body)
            if message is None:
                raise ConnectionFailedError(e) from e
            raise ConnectionRejectedError(message) from e
        except Exception as e:
            raise ConnectionFailedError(e) from e

        logger.debug("Websocket connected to %s", url)
        return WebSocketConnection(ws)
