"""Pytest configuration, Hypothesis profiles and shared fixtures."""

import pytest
from hypothesis import settings

from protoslib.core.config import Settings
from protoslib.core.registry import HandlerRegistry
from protoslib.transport.memory import InMemoryConnection, InMemoryTransport

# Register Hypothesis profiles
settings.register_profile("ci", max_examples=100)
settings.register_profile("dev", max_examples=20)

# Load dev profile by default, CI can override via --hypothesis-profile=ci
settings.load_profile("dev")


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio as the async backend for pytest-asyncio."""
    return "asyncio"


@pytest.fixture
def protos_settings() -> Settings:
    return Settings(app_id="test-app", host="protos.test:8080")


@pytest.fixture
def registry() -> HandlerRegistry:
    return HandlerRegistry()


@pytest.fixture
def connection() -> InMemoryConnection:
    return InMemoryConnection()


@pytest.fixture
def transport(connection: InMemoryConnection) -> InMemoryTransport:
    return InMemoryTransport(connection)
