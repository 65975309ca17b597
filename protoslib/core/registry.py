"""Event kinds and the handler registry consulted by the event loop."""

import inspect
from collections.abc import Callable
from enum import Enum
from typing import Any

from protoslib.core.errors import NoHandlerRegisteredError, UnsupportedKindError

Handler = Callable[..., Any]


class EventKind(Enum):
    """Categories of events a handler can be bound to."""

    NEW_MESSAGE = "newmessage"
    TIMER = "timer"
    TERMINATE = "terminate"


def coerce_kind(kind: "EventKind | str") -> EventKind:
    """Return the EventKind for an enum member or its string value.

    Raises:
        UnsupportedKindError: If kind does not name a supported event kind.
    """
    if isinstance(kind, EventKind):
        return kind
    try:
        return EventKind(kind)
    except ValueError:
        raise UnsupportedKindError(kind) from None


async def invoke_handler(handler: Handler, *args: Any) -> Any:
    """Call a sync or async handler and return its result."""
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class HandlerRegistry:
    """Maps each EventKind to a single handler.

    The last registration for a kind wins. Registration is expected to happen
    before the loop starts; a registry must only back one running session at
    a time, since handlers are looked up on every event without locking.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventKind, Handler] = {}

    def register(self, kind: EventKind | str, handler: Handler) -> None:
        """Bind handler to kind, replacing any previous handler.

        Raises:
            UnsupportedKindError: If kind is not a supported event kind.
            TypeError: If handler is not callable.
        """
        event_kind = coerce_kind(kind)
        if not callable(handler):
            raise TypeError(f"handler must be callable, got {type(handler).__name__}")
        self._handlers[event_kind] = handler

    def on(self, kind: EventKind | str) -> Callable[[Handler], Handler]:
        """Decorator form of register()."""
        event_kind = coerce_kind(kind)

        def decorator(handler: Handler) -> Handler:
            self.register(event_kind, handler)
            return handler

        return decorator

    def unregister(self, kind: EventKind | str) -> None:
        self._handlers.pop(coerce_kind(kind), None)

    def get(self, kind: EventKind | str) -> Handler | None:
        return self._handlers.get(coerce_kind(kind))

    def kinds(self) -> list[EventKind]:
        return list(self._handlers)

    def __contains__(self, kind: object) -> bool:
        try:
            return coerce_kind(kind) in self._handlers  # type: ignore[arg-type]
        except UnsupportedKindError:
            return False

    def __len__(self) -> int:
        return len(self._handlers)

    async def dispatch(self, kind: EventKind | str, *args: Any) -> None:
        """Invoke the handler bound to kind with args.

        Exceptions raised by the handler propagate unchanged.

        Raises:
            NoHandlerRegisteredError: If no handler is bound to kind.
        """
        event_kind = coerce_kind(kind)
        handler = self._handlers.get(event_kind)
        if handler is None:
            raise NoHandlerRegisteredError(event_kind)
        await invoke_handler(handler, *args)
