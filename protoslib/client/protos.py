"""Protos client: resource, provider and info operations.

Each method is a single round-trip through the RequestExecutor.
"""

from collections.abc import Iterable, Mapping
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from protoslib.client.executor import RequestExecutor
from protoslib.client.types import AppInfo, DomainInfo, UserInfo
from protoslib.core.config import Settings
from protoslib.core.errors import ProtosError, ResponseDecodeError
from protoslib.core.loop import EventLoop
from protoslib.core.registry import HandlerRegistry
from protoslib.core.resource import (
    CertificateResource,
    DNSResource,
    ResourceMapAdapter,
    ResourceStatus,
    UnknownResource,
    dump_resource,
    parse_resource,
)
from protoslib.transport.base import Transport

AnyResource = DNSResource | CertificateResource | UnknownResource


def _status_value(status: ResourceStatus | str) -> str:
    return status.value if isinstance(status, ResourceStatus) else status


class ProtosClient:
    """Client for the Protos internal API.

    Usage:
        async with ProtosClient(Settings.from_env()) as client:
            await client.register_provider("dns")

    Args:
        settings: Connection settings and identity.
        http_client: Optional preconfigured httpx client.
        http_transport: Optional httpx transport for the owned client.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.executor = RequestExecutor(settings, http_client=http_client, transport=http_transport)

    @classmethod
    def from_env(cls, host: str | None = None, path_prefix: str | None = None) -> "ProtosClient":
        """Build a client from APPID and the optional PROTOS_* variables.

        Raises:
            ConfigurationError: If APPID is not set.
        """
        return cls(Settings.from_env(host=host, path_prefix=path_prefix))

    async def __aenter__(self) -> "ProtosClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.executor.aclose()

    def event_loop(
        self,
        registry: HandlerRegistry,
        transport: Transport | None = None,
        handle_signals: bool = True,
    ) -> EventLoop:
        """Return an EventLoop connecting with this client's settings."""
        return EventLoop(
            self.settings, registry, transport=transport, handle_signals=handle_signals
        )

    # Providers

    async def register_provider(self, rtype: str) -> None:
        """Register the calling app as provider for resource type rtype."""
        await self.executor.execute("POST", f"provider/{rtype}", b"")

    async def deregister_provider(self, rtype: str) -> None:
        await self.executor.execute("DELETE", f"provider/{rtype}", b"")

    # Resources

    async def create_resource(self, resource: AnyResource) -> AnyResource:
        """Create a resource and return it as stored by Protos (with its ID)."""
        data = await self.executor.execute_json("POST", "resource", dump_resource(resource))
        return self._parse_resource(data)

    async def get_resource(self, resource_id: str) -> AnyResource:
        data = await self.executor.execute_json("GET", f"resource/{resource_id}")
        return self._parse_resource(data)

    async def delete_resource(self, resource_id: str) -> None:
        await self.executor.execute("DELETE", f"resource/{resource_id}")

    async def update_resource_value(
        self, resource_id: str, value: BaseModel | Mapping[str, Any]
    ) -> None:
        """Replace the value of a resource."""
        body = value.model_dump(mode="json") if isinstance(value, BaseModel) else dict(value)
        await self.executor.execute("UPDATE", f"resource/{resource_id}", body)

    async def set_resource_status(self, resource_id: str, status: ResourceStatus | str) -> None:
        await self.executor.execute(
            "POST", f"resource/{resource_id}", {"status": _status_value(status)}
        )

    async def set_status_batch(
        self,
        resources: Mapping[str, AnyResource] | Iterable[AnyResource],
        status: ResourceStatus | str,
    ) -> None:
        """Apply the same status to every resource, stopping at the first failure."""
        items = resources.values() if isinstance(resources, Mapping) else resources
        for resource in items:
            try:
                await self.set_resource_status(resource.id, status)
            except ProtosError as e:
                raise ProtosError(
                    f"Could not set status for resource {resource.id}: {e}"
                ) from e

    async def get_resources(self) -> dict[str, AnyResource]:
        """Return the calling provider's resources, keyed by resource ID."""
        data = await self.executor.execute_json("GET", "resource/provider")
        try:
            return ResourceMapAdapter.validate_python(data)
        except ValidationError as e:
            raise ResponseDecodeError(f"Invalid resource list: {e}") from e

    # Info and users

    async def get_domain(self) -> str:
        """Return the domain name of the Protos instance."""
        data = await self.executor.execute_json("GET", "info/domain")
        return self._parse_model(DomainInfo, data).domain

    async def get_app_info(self) -> AppInfo:
        data = await self.executor.execute_json("GET", "info/app")
        return self._parse_model(AppInfo, data)

    async def auth_user(self, username: str, password: str) -> UserInfo:
        """Authenticate a user and return information about it."""
        data = await self.executor.execute_json(
            "GET", "user/auth", {"username": username, "password": password}
        )
        return self._parse_model(UserInfo, data)

    @staticmethod
    def _parse_resource(data: Any) -> AnyResource:
        try:
            return parse_resource(data)
        except ValidationError as e:
            raise ResponseDecodeError(f"Invalid resource: {e}") from e

    @staticmethod
    def _parse_model(model: type[BaseModel], data: Any) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ResponseDecodeError(f"Invalid {model.__name__}: {e}") from e
