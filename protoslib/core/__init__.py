"""Core components of protoslib.

Types:
    EventKind: The three event categories handlers bind to.
    HandlerRegistry: One handler per EventKind, last registration wins.
    EventLoop: Websocket session that dispatches events to the registry.
    LoopState / LoopStats: Session lifecycle and per-run counters.
    Settings: Host, path prefix and app identity.
    InboundMessage: Decoded update notification.
    DNSResource, CertificateResource, UnknownResource: Resource records.

Errors:
    ProtosError and its subclasses, see protoslib.core.errors.
"""

from protoslib.core.config import Settings, get_app_id
from protoslib.core.errors import (
    ConfigurationError,
    ConnectError,
    ConnectionFailedError,
    ConnectionRejectedError,
    HandlerError,
    HandlerFailedError,
    MalformedMessageError,
    MessageProcessingError,
    NoHandlerRegisteredError,
    ProtocolError,
    ProtosError,
    RequestFailedError,
    ResponseDecodeError,
    TransportError,
    UnsupportedKindError,
    UnsupportedMessageTypeError,
)
from protoslib.core.loop import EventLoop, LoopState, LoopStats
from protoslib.core.message import InboundMessage, decode_message
from protoslib.core.registry import EventKind, HandlerRegistry
from protoslib.core.resource import (
    CertificateResource,
    CertificateValue,
    DNSResource,
    DNSValue,
    ResourceStatus,
    UnknownResource,
    parse_resource,
)

__all__ = [
    "Settings",
    "get_app_id",
    "EventKind",
    "HandlerRegistry",
    "EventLoop",
    "LoopState",
    "LoopStats",
    "InboundMessage",
    "decode_message",
    "CertificateResource",
    "CertificateValue",
    "DNSResource",
    "DNSValue",
    "ResourceStatus",
    "UnknownResource",
    "parse_resource",
    "ProtosError",
    "ConfigurationError",
    "ConnectError",
    "ConnectionRejectedError",
    "ConnectionFailedError",
    "ProtocolError",
    "MalformedMessageError",
    "UnsupportedMessageTypeError",
    "HandlerError",
    "UnsupportedKindError",
    "NoHandlerRegisteredError",
    "HandlerFailedError",
    "MessageProcessingError",
    "TransportError",
    "RequestFailedError",
    "ResponseDecodeError",
]
