"""Integration tests for the DNS provider app.

REST calls go to an httpx.MockTransport, websocket frames come from the
in-memory transport.
"""

import argparse
import asyncio
import json

import httpx
import pytest

from protoslib.apps.dns_provider.main import _main, run_provider, start_provider
from protoslib.client.protos import ProtosClient
from protoslib.core.errors import RequestFailedError
from protoslib.transport.memory import InMemoryConnection, InMemoryTransport


def dns_record(rid: str, host: str, value: str, status: str = "requested") -> dict:
    return {
        "id": rid,
        "type": "dns",
        "status": status,
        "value": {"host": host, "value": value, "type": "A", "ttl": 60},
    }


class ProtosApi:
    """Minimal stateful stand-in for the Protos REST API."""

    def __init__(self, resources: dict | None = None):
        self.resources = resources or {}
        self.calls: list[tuple[str, str]] = []
        self.statuses: dict[str, str] = {}
        self.fail_register = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/internal/")
        self.calls.append((request.method, path))
        if path == "provider/dns" and request.method == "POST" and self.fail_register:
            return httpx.Response(409, json={"error": "provider already registered"})
        if path == "resource/provider":
            return httpx.Response(200, json=self.resources)
        if path.startswith("resource/") and request.method == "POST":
            self.statuses[path.split("/", 1)[1]] = json.loads(request.content)["status"]
        return httpx.Response(200)


@pytest.fixture
def api() -> ProtosApi:
    return ProtosApi({"r1": dns_record("r1", "www", "10.0.0.1")})


@pytest.fixture
async def client(protos_settings, api):
    async with ProtosClient(protos_settings, http_transport=httpx.MockTransport(api)) as c:
        yield c


@pytest.mark.timeout(10)
async def test_provider_lifecycle(client, api):
    connection = InMemoryConnection()
    connection.feed({"type": "update", "update": dns_record("r2", "mail", "10.0.0.2")})
    connection.feed({"type": "update", "update": {"id": "c1", "type": "certificate", "value": {}}})
    lines: list[str] = []

    loop, provider = await start_provider(
        client,
        transport=InMemoryTransport(connection),
        handle_signals=False,
        output_callback=lines.append,
    )
    asyncio.get_running_loop().call_later(0.1, loop.stop)
    stats = await loop.run(10)

    assert api.calls[0] == ("POST", "provider/dns")
    assert ("GET", "resource/provider") in api.calls
    assert api.calls[-1] == ("DELETE", "provider/dns")
    assert set(provider.zone) == {"www", "mail"}
    assert api.statuses == {"r1": "created", "r2": "created"}
    assert "www 60 IN A 10.0.0.1" in lines
    assert provider.reconciliations == 1
    assert provider.deregistered
    assert stats.messages_processed == 2
    assert connection.close_calls == 1


@pytest.mark.timeout(10)
async def test_created_resources_are_not_updated_again(protos_settings):
    api = ProtosApi({"r1": dns_record("r1", "www", "10.0.0.1", status="created")})
    async with ProtosClient(protos_settings, http_transport=httpx.MockTransport(api)) as client:
        loop, provider = await start_provider(
            client, transport=InMemoryTransport(), handle_signals=False
        )
        asyncio.get_running_loop().call_later(0.05, loop.stop)
        await loop.run(10)

    assert "www" in provider.zone
    assert api.statuses == {}


async def test_registration_failure_prevents_loop(client, api):
    api.fail_register = True
    transport = InMemoryTransport()

    with pytest.raises(RequestFailedError, match="provider already registered"):
        await run_provider(client, interval=10, transport=transport, handle_signals=False)

    assert transport.connects == []


async def test_main_without_identity_exits_with_configuration_error(monkeypatch, capsys):
    monkeypatch.delenv("APPID", raising=False)
    args = argparse.Namespace(host="h:1", path_prefix=None, interval=1.0)

    assert await _main(args) == 2
    assert "APPID" in capsys.readouterr().out
