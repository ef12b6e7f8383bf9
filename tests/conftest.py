from __future__ import annotations

from typing import Any

import pytest

from multimodal_live import LiveCallbacks, LogEvent, MultimodalLiveClient


class FakeSessionHandle:
    """Session handle that records every call made by the client."""

    def __init__(self, callbacks: LiveCallbacks) -> None:
        self.callbacks = callbacks
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_with: Exception | None = None
        self.closed = False

    def _record(self, name: str, **kwargs: Any) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.calls.append((name, kwargs))

    async def send_client_content(self, *, turns, turn_complete=True) -> None:
        self._record("send_client_content", turns=turns, turn_complete=turn_complete)

    async def send_realtime_input(self, *, media) -> None:
        self._record("send_realtime_input", media=media)

    async def send_tool_response(self, *, function_responses) -> None:
        self._record("send_tool_response", function_responses=function_responses)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.calls.append(("close", {}))
        await self.callbacks.on_close(None)


class FakeTransport:
    """Transport that hands out FakeSessionHandles."""

    def __init__(self) -> None:
        self.opened: list[tuple[str, Any]] = []
        self.handles: list[FakeSessionHandle] = []
        self.callbacks: LiveCallbacks | None = None
        self.error: Exception | None = None

    async def open(self, model, config, callbacks) -> FakeSessionHandle:
        self.opened.append((model, config))
        self.callbacks = callbacks
        if self.error is not None:
            raise self.error
        handle = FakeSessionHandle(callbacks)
        self.handles.append(handle)
        return handle

    @property
    def handle(self) -> FakeSessionHandle:
        return self.handles[-1]


class EventRecorder:
    def __init__(self) -> None:
        self.events: list[Any] = []

    def __call__(self, event: Any) -> None:
        self.events.append(event)

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]

    def names(self, include_logs: bool = False) -> list[str]:
        return [
            type(e).__name__
            for e in self.events
            if include_logs or not isinstance(e, LogEvent)
        ]

    def log_types(self) -> list[str]:
        return [e.log.type for e in self.events if isinstance(e, LogEvent)]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> MultimodalLiveClient:
    return MultimodalLiveClient(transport)


@pytest.fixture
def recorder(client: MultimodalLiveClient) -> EventRecorder:
    events = EventRecorder()
    client.subscribe(events)
    return events
