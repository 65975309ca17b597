"""protoslib - Python client library for Protos resource providers."""

from protoslib.client import AppInfo, ProtosClient, RequestExecutor, UserInfo
from protoslib.core import (
    CertificateResource,
    CertificateValue,
    ConfigurationError,
    ConnectError,
    ConnectionFailedError,
    ConnectionRejectedError,
    DNSResource,
    DNSValue,
    EventKind,
    EventLoop,
    HandlerError,
    HandlerFailedError,
    HandlerRegistry,
    InboundMessage,
    LoopState,
    LoopStats,
    MalformedMessageError,
    MessageProcessingError,
    NoHandlerRegisteredError,
    ProtocolError,
    ProtosError,
    RequestFailedError,
    ResourceStatus,
    ResponseDecodeError,
    Settings,
    TransportError,
    UnknownResource,
    UnsupportedKindError,
    UnsupportedMessageTypeError,
)
from protoslib.transport import InMemoryTransport, WebSocketTransport

__version__ = "0.1.0"

__all__ = [
    # Core
    "EventKind",
    "EventLoop",
    "HandlerRegistry",
    "LoopState",
    "LoopStats",
    "Settings",
    # Messages and resources
    "InboundMessage",
    "DNSResource",
    "DNSValue",
    "CertificateResource",
    "CertificateValue",
    "UnknownResource",
    "ResourceStatus",
    # Errors
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
    # Client
    "ProtosClient",
    "RequestExecutor",
    "AppInfo",
    "UserInfo",
    # Transports
    "WebSocketTransport",
    "InMemoryTransport",
    # Meta
    "__version__",
]
