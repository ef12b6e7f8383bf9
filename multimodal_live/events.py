"""Typed events and the emitter that delivers them to subscribers."""
from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Awaitable, TypeVar, Union

from .models import ModelTurn, StreamingLog, ToolCall, ToolCallCancellation

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenEvent:
    """The session opened."""


@dataclass(frozen=True)
class SetupCompleteEvent:
    """The session is ready to accept input."""


@dataclass(frozen=True)
class CloseEvent:
    """The session closed, with the close reason when one was given."""

    reason: str | None = None


@dataclass(frozen=True)
class AudioEvent:
    """One decoded audio/pcm part."""

    data: bytes


@dataclass(frozen=True)
class ContentEvent:
    """All non-audio parts of one model turn message."""

    model_turn: ModelTurn


@dataclass(frozen=True)
class InterruptedEvent:
    """The model response was interrupted."""


@dataclass(frozen=True)
class TurnCompleteEvent:
    """The model finished its turn."""


@dataclass(frozen=True)
class ToolCallEvent:
    tool_call: ToolCall


@dataclass(frozen=True)
class ToolCallCancellationEvent:
    cancellation: ToolCallCancellation


@dataclass(frozen=True)
class LogEvent:
    log: StreamingLog


LiveEvent = Union[
    OpenEvent,
    SetupCompleteEvent,
    CloseEvent,
    AudioEvent,
    ContentEvent,
    InterruptedEvent,
    TurnCompleteEvent,
    ToolCallEvent,
    ToolCallCancellationEvent,
    LogEvent,
]

EVENT_TYPES: tuple[type, ...] = (
    OpenEvent,
    SetupCompleteEvent,
    CloseEvent,
    AudioEvent,
    ContentEvent,
    InterruptedEvent,
    TurnCompleteEvent,
    ToolCallEvent,
    ToolCallCancellationEvent,
    LogEvent,
)

EventT = TypeVar("EventT")
EventHandler = Callable[[Any], Union[None, Awaitable[None]]]


class LiveEventEmitter:
    """Deliver events to handlers registered per event class.

    Handlers may be plain callables or coroutine functions; coroutine
    handlers are awaited in registration order so delivery order matches
    emission order.
    """

    def __init__(self) -> None:
        self._event_handlers: dict[type, list[EventHandler]] = {}
        self._subscribers: list[EventHandler] = []

    def on(self, event_type: type[EventT], handler: Callable[[EventT], Any]) -> None:
        """Register a handler for one event class."""
        if event_type not in EVENT_TYPES:
            raise TypeError(f"Unknown event type: {event_type!r}")
        handlers = self._event_handlers.setdefault(event_type, [])
        # Avoid registering the same handler more than once
        if handler not in handlers:
            handlers.append(handler)

    def off(self, event_type: type[EventT], handler: Callable[[EventT], Any]) -> None:
        """Remove a handler registered with on()."""
        handlers = self._event_handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for every event; returns a function that unsubscribes it."""
        if handler not in self._subscribers:
            self._subscribers.append(handler)

        def unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return unsubscribe

    def clear_event_handlers(self) -> None:
        self._event_handlers.clear()
        self._subscribers.clear()

    async def emit(self, event: LiveEvent) -> None:
        """Emit an event to registered handlers."""
        handlers = list(self._event_handlers.get(type(event), [])) + list(self._subscribers)
        for handler in handlers:
            try:
                if inspect.iscoroutinefunction(handler):
                    await handler(event)
                else:
                    result = handler(event)
                    if inspect.isawaitable(result):
                        await result
            except Exception:
                _LOGGER.exception("Error in event handler for %s", type(event).__name__)

    async def wait_for_next(self, event_type: type[EventT], timeout: float | None = None) -> EventT:
        """Wait for the next occurrence of an event class."""
        future: asyncio.Future[EventT] = asyncio.get_running_loop().create_future()

        def handler(event: EventT) -> None:
            if not future.done():
                future.set_result(event)

        self.on(event_type, handler)
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        finally:
            self.off(event_type, handler)
