"""DNSProvider: keeps a local zone in sync with the dns resources in Protos."""

import logging
from collections.abc import Callable

from protoslib.client.protos import ProtosClient
from protoslib.core.registry import EventKind, HandlerRegistry
from protoslib.core.resource import (
    CertificateResource,
    DNSResource,
    DNSValue,
    ResourceStatus,
    ResourceType,
    UnknownResource,
)

logger = logging.getLogger(__name__)


class DNSProvider:
    """Fulfils dns resources by publishing them into an in-process zone.

    Timer events trigger a full reconciliation against Protos, update
    messages apply a single record, and termination deregisters the provider.

    Args:
        client: Client used for all REST calls.
        output_callback: Optional callback receiving one line per published record.
    """

    rtype = ResourceType.DNS.value

    def __init__(
        self,
        client: ProtosClient,
        output_callback: Callable[[str], None] | None = None,
    ) -> None:
        self.client = client
        self.output_callback = output_callback
        self.zone: dict[str, DNSValue] = {}
        self.reconciliations = 0
        self.deregistered = False

    def attach(self, registry: HandlerRegistry) -> None:
        registry.register(EventKind.TIMER, self.reconcile)
        registry.register(EventKind.NEW_MESSAGE, self.on_update)
        registry.register(EventKind.TERMINATE, self.on_terminate)

    async def register(self) -> None:
        await self.client.register_provider(self.rtype)

    async def reconcile(self) -> None:
        """Publish every dns resource Protos holds for this provider."""
        self.reconciliations += 1
        resources = await self.client.get_resources()
        for resource in resources.values():
            if isinstance(resource, DNSResource):
                await self._publish(resource)

    async def on_update(
        self, resource: DNSResource | CertificateResource | UnknownResource
    ) -> None:
        if not isinstance(resource, DNSResource):
            logger.info("Ignoring update for %s resource %s", resource.type, resource.id)
            return
        await self._publish(resource)

    async def on_terminate(self) -> None:
        await self.client.deregister_provider(self.rtype)
        self.deregistered = True

    async def _publish(self, resource: DNSResource) -> None:
        record = resource.value
        self.zone[record.host] = record
        if self.output_callback:
            self.output_callback(f"{record.host} {record.ttl} IN {record.type} {record.value}")
        if resource.status == ResourceStatus.REQUESTED.value:
            await self.client.set_resource_status(resource.id, ResourceStatus.CREATED)
