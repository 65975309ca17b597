"""Transport protocol for the persistent event connection.

The event loop never touches a socket library directly. It asks a
Transport for a Connection and only uses the three calls below, which keeps
the close handshake identical across implementations.
"""

from collections.abc import Mapping
from typing import Protocol

# RFC 6455 normal closure
CLOSE_NORMAL = 1000


class Connection(Protocol):
    """An open, bidirectional message connection.

    Connections are owned by exactly one event loop session.
    """

    async def recv(self) -> str | bytes:
        """Wait for and return the next frame.

        Raises:
            Exception: Any failure means the connection can no longer be read.
        """
        ...

    async def send_close(self, code: int = CLOSE_NORMAL, reason: str = "") -> None:
        """Send a close notification to the peer.

        May fail if the peer already went away; callers treat this as
        best-effort.
        """
        ...

    async def close(self) -> None:
        """Tear down the underlying connection unconditionally."""
        ...


class Transport(Protocol):
    """Factory for connections."""

    async def connect(self, url: str, headers: Mapping[str, str]) -> Connection:
        """Open a connection to url, sending headers on the handshake.

        Raises:
            ConnectionRejectedError: The server refused with a decodable message.
            ConnectionFailedError: Any other failure.
        """
        ...
