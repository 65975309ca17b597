"""Error taxonomy for protoslib.

Every error raised by the library derives from ProtosError so callers can
catch the whole family with a single except clause.
"""

import json
from typing import Any


class ProtosError(Exception):
    """Base class for all protoslib errors."""


class ConfigurationError(ProtosError):
    """Raised at startup when required configuration (the app identity) is missing."""


class ConnectError(ProtosError):
    """Raised when the websocket connection to Protos cannot be established."""


class ConnectionRejectedError(ConnectError):
    """The server answered the handshake with a decodable error message.

    Attributes:
        message: The error text sent by the server.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Failed to establish ws connection: {message}")


class ConnectionFailedError(ConnectError):
    """The connection attempt failed without a usable server message.

    Attributes:
        cause: The underlying exception.
    """

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Failed to establish ws connection: {cause}")


class ProtocolError(ProtosError):
    """Raised when an inbound message violates the wire protocol."""


class MalformedMessageError(ProtocolError):
    """The inbound frame could not be decoded as a message envelope."""


class UnsupportedMessageTypeError(ProtocolError):
    """The inbound envelope carries a message type other than ``update``."""

    def __init__(self, msg_type: str):
        self.msg_type = msg_type
        super().__init__(
            f"Failed to process Protos event. Message type {msg_type!r} is not supported"
        )


class HandlerError(ProtosError):
    """Base class for handler registration and dispatch failures."""


class UnsupportedKindError(HandlerError):
    """Raised when registering a handler for an unknown event kind."""

    def __init__(self, kind: Any):
        self.kind = kind
        super().__init__(f"Failed to add event handler. Event kind {kind!r} is not supported")


class NoHandlerRegisteredError(HandlerError):
    """Raised when an event occurs for a kind with no registered handler."""

    def __init__(self, kind: Any):
        self.kind = kind
        super().__init__(f"No handler registered for event kind {_kind_name(kind)!r}")


class HandlerFailedError(HandlerError):
    """A registered handler raised while processing an event.

    Attributes:
        kind: The event kind being dispatched.
        original: The exception raised by the handler.
    """

    def __init__(self, kind: Any, original: BaseException):
        self.kind = kind
        self.original = original
        super().__init__(f"Handler for {_kind_name(kind)!r} failed: {original}")


class MessageProcessingError(HandlerError):
    """Dispatching an inbound update message failed."""

    def __init__(self, original: BaseException):
        self.original = original
        super().__init__(f"Failed to process event: {original}")


class TransportError(ProtosError):
    """Raised on a read/write failure of an established connection or HTTP request."""

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.cause is not None:
            return f"{base}: {self.cause}"
        return base


class RequestFailedError(ProtosError):
    """The REST API answered with a non-success status.

    Attributes:
        message: Decoded ``error`` field, or the raw body text.
        status_code: HTTP status of the response.
    """

    def __init__(self, message: str, status_code: int):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ResponseDecodeError(ProtosError):
    """A success response carried a payload that could not be decoded."""


def _kind_name(kind: Any) -> str:
    return getattr(kind, "value", kind)


def decode_error_body(body: bytes | str | None) -> str | None:
    """Extract the message from a ``{"error": "..."}`` response body.

    Returns None when the body is empty or is not such an object.
    """
    if not body:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return None
