"""Resource records exchanged with Protos.

A resource is a typed record owned by a provider. The ``type`` field selects
the shape of ``value``; records of a type this library does not know about
are kept verbatim as UnknownResource so newer servers do not break older
providers.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    model_serializer,
)


class ResourceStatus(str, Enum):
    """Well-known resource statuses. The server may send others."""

    REQUESTED = "requested"
    CREATED = "created"
    UNKNOWN = "unknown"


class ResourceType(str, Enum):
    DNS = "dns"
    CERTIFICATE = "certificate"


class DNSValue(BaseModel):
    """A DNS record requested from a DNS provider."""

    host: str
    value: str
    type: str = "A"
    ttl: int = Field(default=300, ge=0)


class CertificateValue(BaseModel):
    """An X.509 certificate request and, once fulfilled, its material."""

    domains: list[str] = Field(default_factory=list)
    privatekey: str = ""
    certificate: str = ""
    issuercertificate: str = ""
    csr: str = ""


class _ResourceBase(BaseModel):
    id: str = ""
    status: str = ResourceStatus.REQUESTED.value

    model_config = {"extra": "ignore"}


class DNSResource(_ResourceBase):
    type: Literal["dns"] = "dns"
    value: DNSValue


class CertificateResource(_ResourceBase):
    type: Literal["certificate"] = "certificate"
    value: CertificateValue


class UnknownResource(BaseModel):
    """A record whose type is not modelled here.

    Attributes:
        raw: The record exactly as it was received.
    """

    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def id(self) -> str:
        return str(self.raw.get("id", ""))

    @property
    def type(self) -> str | None:
        rtype = self.raw.get("type")
        return rtype if isinstance(rtype, str) else None

    @property
    def status(self) -> str | None:
        return self.raw.get("status")

    @model_serializer
    def _serialize(self) -> dict[str, Any]:
        return dict(self.raw)


_KNOWN_TYPES = frozenset(t.value for t in ResourceType)


def _resource_tag(value: Any) -> str:
    if isinstance(value, Mapping):
        rtype = value.get("type")
    else:
        rtype = getattr(value, "type", None)
    return rtype if rtype in _KNOWN_TYPES else "unknown"


def _wrap_unknown(value: Any) -> Any:
    if isinstance(value, UnknownResource):
        return value
    if isinstance(value, Mapping):
        return {"raw": dict(value)}
    return value


Resource = Annotated[
    Union[
        Annotated[DNSResource, Tag("dns")],
        Annotated[CertificateResource, Tag("certificate")],
        Annotated[UnknownResource, BeforeValidator(_wrap_unknown), Tag("unknown")],
    ],
    Discriminator(_resource_tag),
]

ResourceAdapter: TypeAdapter[Any] = TypeAdapter(Resource)
ResourceMapAdapter: TypeAdapter[dict[str, Any]] = TypeAdapter(dict[str, Resource])


def parse_resource(data: Any) -> DNSResource | CertificateResource | UnknownResource:
    """Validate a decoded JSON record into its resource variant.

    Raises:
        pydantic.ValidationError: If a known record type has an invalid shape.
    """
    return ResourceAdapter.validate_python(data)


def dump_resource(resource: DNSResource | CertificateResource | UnknownResource) -> dict[str, Any]:
    """Return the JSON-compatible wire form of a resource."""
    return resource.model_dump(mode="json")
