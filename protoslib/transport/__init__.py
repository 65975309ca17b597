"""Connection transports for the event loop."""

from protoslib.transport.base import CLOSE_NORMAL, Connection, Transport
from protoslib.transport.memory import ConnectionClosed, InMemoryConnection, InMemoryTransport
from protoslib.transport.websocket import WebSocketConnection, WebSocketTransport

__all__ = [
    "CLOSE_NORMAL",
    "Connection",
    "Transport",
    "ConnectionClosed",
    "InMemoryConnection",
    "InMemoryTransport",
    "WebSocketConnection",
    "WebSocketTransport",
]
