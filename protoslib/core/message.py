"""Wire envelope for messages pushed by Protos over the websocket."""

from typing import Any

from pydantic import BaseModel, ValidationError

from protoslib.core.errors import MalformedMessageError, UnsupportedMessageTypeError
from protoslib.core.resource import Resource, parse_resource

# The only message type Protos currently sends
MSG_TYPE_UPDATE = "update"


class _Envelope(BaseModel):
    type: str
    update: Any = None

    model_config = {"extra": "ignore"}


class InboundMessage(BaseModel):
    """A decoded update notification.

    Attributes:
        type: Message type discriminant, always ``update``.
        update: The record the notification is about.
    """

    type: str = MSG_TYPE_UPDATE
    update: Resource

    model_config = {"frozen": True}


def decode_message(frame: str | bytes) -> InboundMessage:
    """Decode a websocket frame into an InboundMessage.

    The message type is checked before the payload is parsed, so an
    unsupported type is reported as such even when its payload is garbage.

    Raises:
        MalformedMessageError: If the frame is not a valid envelope or the
            update payload does not match its declared record type.
        UnsupportedMessageTypeError: If the type is anything but ``update``.
    """
    try:
        envelope = _Envelope.model_validate_json(frame)
    except ValidationError as e:
        raise MalformedMessageError(f"Failed to decode ws message: {e}") from e

    if envelope.type != MSG_TYPE_UPDATE:
        raise UnsupportedMessageTypeError(envelope.type)

    if envelope.update is None:
        raise MalformedMessageError("Update message carries no payload")

    try:
        update = parse_resource(envelope.update)
    except ValidationError as e:
        raise MalformedMessageError(f"Failed to decode update payload: {e}") from e

    return InboundMessage(type=envelope.type, update=update)
