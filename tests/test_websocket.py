"""Tests for WebSocketTransport against a local websockets server."""

import asyncio
import json
import socket
from http import HTTPStatus

import pytest
from websockets.asyncio.server import serve

from protoslib.core.config import Settings
from protoslib.core.errors import ConnectionFailedError, ConnectionRejectedError, TransportError
from protoslib.core.loop import EventLoop
from protoslib.core.registry import EventKind, HandlerRegistry
from protoslib.core.resource import DNSResource
from protoslib.transport.websocket import WebSocketTransport

UPDATE = {
    "type": "update",
    "update": {"id": "r1", "type": "dns", "value": {"host": "www", "value": "10.0.0.1"}},
}


class FakeServer:
    """Protos-like ws endpoint recording handshakes and close frames."""

    def __init__(self, frames=(), close_immediately=False, reject_body=None):
        self.frames = list(frames)
        self.close_immediately = close_immediately
        self.reject_body = reject_body
        self.app_ids: list[str | None] = []
        self.paths: list[str] = []
        self.closes: list[tuple[int | None, str | None]] = []

    def process_request(self, connection, request):
        if self.reject_body is not None:
            return connection.respond(HTTPStatus.UNAUTHORIZED, self.reject_body)
        return None

    async def handler(self, ws):
        self.app_ids.append(ws.request.headers.get("Appid"))
        self.paths.append(ws.request.path)
        if self.close_immediately:
            await ws.close()
        else:
            for frame in self.frames:
                await ws.send(json.dumps(frame))
            await ws.wait_closed()
        self.closes.append((ws.close_code, ws.close_reason))


async def wait_for(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate() and loop.time() < deadline:
        await asyncio.sleep(0.01)


@pytest.fixture
async def start_server():
    servers = []

    async def _start(fake: FakeServer) -> Settings:
        server = await serve(fake.handler, "127.0.0.1", 0, process_request=fake.process_request)
        servers.append(server)
        port = server.sockets[0].getsockname()[1]
        return Settings(app_id="ws-app", host=f"127.0.0.1:{port}")

    yield _start

    for server in servers:
        server.close()
        await server.wait_closed()


@pytest.mark.timeout(10)
async def test_loop_over_websocket(start_server):
    fake = FakeServer(frames=[UPDATE])
    settings = await start_server(fake)
    received = []
    registry = HandlerRegistry()
    registry.register(EventKind.TIMER, lambda: None)
    loop = EventLoop(settings, registry, transport=WebSocketTransport(), handle_signals=False)

    def on_update(update):
        received.append(update)
        loop.stop()

    registry.register(EventKind.NEW_MESSAGE, on_update)

    stats = await loop.run(10)
    await wait_for(lambda: fake.closes)

    assert stats.messages_processed == 1
    assert isinstance(received[0], DNSResource)
    assert fake.app_ids == ["ws-app"]
    assert fake.paths == ["/internal/ws"]
    assert fake.closes == [(1000, "terminating")]


@pytest.mark.timeout(10)
async def test_peer_close_is_transport_error(start_server):
    fake = FakeServer(close_immediately=True)
    settings = await start_server(fake)
    terminated = []
    registry = HandlerRegistry()
    registry.register(EventKind.TIMER, lambda: None)
    registry.register(EventKind.TERMINATE, lambda: terminated.append(True))
    loop = EventLoop(settings, registry, transport=WebSocketTransport(), handle_signals=False)

    with pytest.raises(TransportError):
        await loop.run(10)

    assert terminated == [True]


async def test_rejected_handshake_decodes_error(start_server):
    settings = await start_server(FakeServer(reject_body='{"error": "unknown app"}\n'))

    with pytest.raises(ConnectionRejectedError) as exc_info:
        await WebSocketTransport().connect(settings.ws_url, settings.identity_headers)

    assert exc_info.value.message == "unknown app"


async def test_rejected_handshake_without_error_body(start_server):
    settings = await start_server(FakeServer(reject_body="go away\n"))

    with pytest.raises(ConnectionFailedError):
        await WebSocketTransport().connect(settings.ws_url, settings.identity_headers)


async def test_unreachable_host_is_connection_failure():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]

    with pytest.raises(ConnectionFailedError) as exc_info:
        await WebSocketTransport(open_timeout=2).connect(f"ws://127.0.0.1:{port}/ws", {"Appid": "a"})

    assert isinstance(exc_info.value.cause, OSError)
