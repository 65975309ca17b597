"""Event loop for Protos update notifications.

The EventLoop is the central dispatcher that:
- Opens the persistent websocket connection to Protos
- Merges inbound messages, a periodic timer and shutdown requests into one
  stream of events
- Routes each event to the handler registered for its EventKind
- Runs the close handshake exactly once, whatever ended the session

Handlers run one at a time on the task that called run(). A slow handler
delays everything else, including timer ticks and message draining.
"""

import asyncio
import random
import signal
from collections.abc import Coroutine
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any
from uuid import uuid4

from protoslib.core.config import Settings
from protoslib.core.errors import (
    HandlerError,
    HandlerFailedError,
    MessageProcessingError,
    TransportError,
)
from protoslib.core.logging import SessionLogAdapter, configure_loop_logger, session_logger
from protoslib.core.message import decode_message
from protoslib.core.registry import EventKind, HandlerRegistry, invoke_handler
from protoslib.transport.base import CLOSE_NORMAL, Connection, Transport
from protoslib.transport.websocket import WebSocketTransport

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

CLOSE_REASON = "terminating"


class LoopState(Enum):
    """Lifecycle of a single session."""

    CONNECTING = "connecting"
    RUNNING = "running"
    TERMINATING = "terminating"
    CLOSED = "closed"


class _Source(Enum):
    TICK = "tick"
    SHUTDOWN = "shutdown"
    ERROR = "error"
    MESSAGE = "message"


@dataclass
class LoopStats:
    """Statistics from a single run."""

    timer_events: int = 0
    messages_processed: int = 0
    handler_errors: int = 0
    termination_reason: str | None = None


@dataclass
class LoopSession:
    """Live state of one connection, from connect until the close handshake.

    The reader and ticker tasks only ever put into the queues; everything
    else is touched by the control task alone.
    """

    interval: float
    loop: asyncio.AbstractEventLoop
    id: str = field(default_factory=lambda: uuid4().hex[:12])
    state: LoopState = LoopState.CONNECTING
    connection: Connection | None = None
    messages: asyncio.Queue = field(default_factory=lambda: asyncio.Queue(maxsize=1))
    errors: asyncio.Queue = field(default_factory=lambda: asyncio.Queue(maxsize=1))
    ticks: asyncio.Queue = field(default_factory=lambda: asyncio.Queue(maxsize=1))
    shutdown: asyncio.Event = field(default_factory=asyncio.Event)
    tasks: list[asyncio.Task] = field(default_factory=list)
    # Signal -> handler installed with signal.signal() before the session
    signals: dict[signal.Signals, Any] = field(default_factory=dict)
    log: SessionLogAdapter = field(init=False)

    def __post_init__(self) -> None:
        self.log = session_logger(self.id)


class EventLoop:
    """Connects to Protos and feeds events to registered handlers.

    A registry must only be used by one running EventLoop at a time, and
    handlers should be registered before run() is called.

    Args:
        settings: Where to connect and which identity to present.
        registry: Handlers for NEW_MESSAGE, TIMER and TERMINATE events.
        transport: Connection factory. Defaults to WebSocketTransport.
        handle_signals: Treat SIGINT/SIGTERM as a shutdown request while running.
            Handlers installed with signal.signal() are restored afterwards;
            handlers added with loop.add_signal_handler() are replaced.
    """

    def __init__(
        self,
        settings: Settings,
        registry: HandlerRegistry,
        transport: Transport | None = None,
        handle_signals: bool = True,
    ) -> None:
        self.settings = settings
        self.registry = registry
        self.transport = transport if transport is not None else WebSocketTransport()
        self.handle_signals = handle_signals
        configure_loop_logger()
        self._session: LoopSession | None = None
        self._stats = LoopStats()

    @property
    def state(self) -> LoopState:
        """State of the active session, CLOSED when no session is active."""
        if self._session is None:
            return LoopState.CLOSED
        return self._session.state

    def stop(self) -> None:
        """Request a normal shutdown of the active session.

        Safe to call from any thread. Does nothing when no session is active.
        """
        session = self._session
        if session is None:
            return
        session.loop.call_soon_threadsafe(session.shutdown.set)

    def get_stats(self) -> LoopStats:
        """Return a snapshot of the current statistics."""
        return replace(self._stats)

    async def run(self, interval: float) -> LoopStats:
        """Run one session until shutdown or a fatal error.

        Args:
            interval: Seconds between timer events.

        Returns:
            Statistics for the session, when it ended on a shutdown request.

        Raises:
            ConnectError: The connection could not be opened. No handler runs.
            ProtosError: Whatever ended the session, raised after the close
                handshake completed.
        """
        if self._session is not None:
            raise RuntimeError("EventLoop is already running a session")
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        session = LoopSession(interval=interval, loop=asyncio.get_running_loop())
        self._session = session
        self._stats = LoopStats()

        try:
            session.connection = await self._connect(session)
        except BaseException:
            session.state = LoopState.CLOSED
            self._session = None
            raise

        self._set_state(session, LoopState.RUNNING)
        self._install_signal_handlers(session)
        try:
            await self._serve(session)
        except Exception as e:
            self._stats.termination_reason = "error"
            session.log.error(
                f"Session failed: {e}",
                extra={"error": str(e)},
            )
            raise
        finally:
            self._remove_signal_handlers(session)
            await self._terminate(session)
            self._session = None

        return self.get_stats()

    async def _connect(self, session: LoopSession) -> Connection:
        session.log.info(
            f"Connecting to {self.settings.ws_url}",
            extra={"state": session.state.value},
        )
        try:
            return await self.transport.connect(
                self.settings.ws_url, self.settings.identity_headers
            )
        except Exception as e:
            session.log.error(
                f"Connection failed: {e}",
                extra={"error": str(e)},
            )
            raise

    async def _serve(self, session: LoopSession) -> None:
        session.tasks.append(
            asyncio.create_task(self._read_frames(session), name=f"protos-reader-{session.id}")
        )
        session.tasks.append(
            asyncio.create_task(self._tick(session), name=f"protos-ticker-{session.id}")
        )

        # Initial timer event so handlers can reconcile everything before
        # relying on incremental updates.
        await self._dispatch_timer(session)

        waiters: dict[_Source, asyncio.Task] = {}
        try:
            while True:
                for source in _Source:
                    if source not in waiters:
                        waiters[source] = asyncio.create_task(self._wait_for(session, source))

                done, _ = await asyncio.wait(
                    waiters.values(), return_when=asyncio.FIRST_COMPLETED
                )
                # No priority among sources: pick any ready one. The others
                # keep their result and are ready again on the next pass.
                ready = [source for source, task in waiters.items() if task in done]
                source = random.choice(ready)
                value = waiters.pop(source).result()

                if source is _Source.SHUTDOWN:
                    self._stats.termination_reason = "shutdown"
                    session.log.info("Shutdown requested")
                    return
                if source is _Source.ERROR:
                    raise value
                if source is _Source.TICK:
                    await self._dispatch_timer(session)
                else:
                    await self._handle_message(session, value)
        finally:
            for task in waiters.values():
                task.cancel()
            await asyncio.gather(*waiters.values(), return_exceptions=True)

    def _wait_for(self, session: LoopSession, source: _Source) -> Coroutine[Any, Any, Any]:
        if source is _Source.TICK:
            return session.ticks.get()
        if source is _Source.SHUTDOWN:
            return session.shutdown.wait()
        if source is _Source.ERROR:
            return session.errors.get()
        return session.messages.get()

    async def _read_frames(self, session: LoopSession) -> None:
        connection = session.connection
        while True:
            try:
                frame = await connection.recv()
            except Exception as e:
                await session.errors.put(TransportError("Failed to read ws message", e))
                return
            await session.messages.put(frame)

    async def _tick(self, session: LoopSession) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while True:
            deadline += session.interval
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            try:
                session.ticks.put_nowait(loop.time())
            except asyncio.QueueFull:
                # Previous tick not consumed yet; drop this one
                pass
            while deadline + session.interval <= loop.time():
                deadline += session.interval

    async def _dispatch(self, session: LoopSession, kind: EventKind, *args: Any) -> None:
        session.log.debug(
            f"Dispatching {kind.value}",
            extra={"event_kind": kind.value},
        )
        try:
            await self.registry.dispatch(kind, *args)
        except HandlerError:
            self._stats.handler_errors += 1
            raise
        except Exception as e:
            self._stats.handler_errors += 1
            raise HandlerFailedError(kind, e) from e

    async def _dispatch_timer(self, session: LoopSession) -> None:
        self._stats.timer_events += 1
        await self._dispatch(session, EventKind.TIMER)

    async def _handle_message(self, session: LoopSession, frame: str | bytes) -> None:
        message = decode_message(frame)
        try:
            await self._dispatch(session, EventKind.NEW_MESSAGE, message.update)
        except HandlerError as e:
            raise MessageProcessingError(e) from e
        self._stats.messages_processed += 1

    async def _terminate(self, session: LoopSession) -> None:
        self._set_state(session, LoopState.TERMINATING)

        for task in session.tasks:
            task.cancel()
        await asyncio.gather(*session.tasks, return_exceptions=True)

        connection = session.connection
        try:
            await connection.send_close(CLOSE_NORMAL, CLOSE_REASON)
        except Exception as e:
            # The peer may have closed already
            session.log.debug(
                f"Close frame not sent: {e}",
                extra={"error": str(e)},
            )
        try:
            await connection.close()
        except Exception as e:
            session.log.warning(
                f"Error closing connection: {e}",
                extra={"error": str(e)},
            )

        handler = self.registry.get(EventKind.TERMINATE)
        if handler is not None:
            session.log.debug(
                "Dispatching terminate",
                extra={"event_kind": EventKind.TERMINATE.value},
            )
            try:
                await invoke_handler(handler)
            except Exception as e:
                session.log.error(
                    f"Terminate handler raised exception: {e}",
                    extra={"event_kind": EventKind.TERMINATE.value, "error": str(e)},
                )

        self._set_state(session, LoopState.CLOSED)

    def _set_state(self, session: LoopSession, state: LoopState) -> None:
        session.state = state
        session.log.info(f"Session {state.value}", extra={"state": state.value})

    def _install_signal_handlers(self, session: LoopSession) -> None:
        if not self.handle_signals:
            return
        for sig in SHUTDOWN_SIGNALS:
            previous = signal.getsignal(sig)
            try:
                session.loop.add_signal_handler(sig, session.shutdown.set)
            except (NotImplementedError, RuntimeError, ValueError) as e:
                # Not the main thread, or a platform without signal support
                session.log.debug(f"Cannot watch {sig.name}: {e}")
                continue
            session.signals[sig] = previous

    def _remove_signal_handlers(self, session: LoopSession) -> None:
        for sig, previous in session.signals.items():
            session.loop.remove_signal_handler(sig)
            if previous is not None:
                signal.signal(sig, previous)
        session.signals.clear()
