"""Transport contract for live sessions and its google-genai implementation.

The client only talks to a ``LiveTransport``: ``open()`` returns a
``LiveSessionHandle`` and reports session activity through the four
``LiveCallbacks``. ``GenaiLiveTransport`` drives the Gemini Live API
through ``google-genai``: the SDK's async receive iterator is pumped by one
background task that invokes the callbacks.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from google import genai
from google.genai import errors, types
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

_LOGGER = logging.getLogger(__name__)


@dataclass
class LiveCallbacks:
    """Callbacks installed by the client when a session is opened."""

    on_open: Callable[[], Awaitable[None]]
    on_message: Callable[[Any], Awaitable[None]]
    on_error: Callable[[BaseException], Awaitable[None]]
    on_close: Callable[[str | None], Awaitable[None]]


class LiveSessionHandle(Protocol):
    """An open session as seen by the client."""

    async def send_client_content(
        self,
        *,
        turns: types.Content | Sequence[types.Content],
        turn_complete: bool = True,
    ) -> None: ...

    async def send_realtime_input(self, *, media: types.Blob) -> None: ...

    async def send_tool_response(
        self,
        *,
        function_responses: Sequence[types.FunctionResponse],
    ) -> None: ...

    async def close(self) -> None: ...


class LiveTransport(Protocol):
    """Opens sessions against a live generation service."""

    async def open(
        self,
        model: str,
        config: types.LiveConnectConfig,
        callbacks: LiveCallbacks,
    ) -> LiveSessionHandle: ...


# Websocket close codes that end a session without error
NORMAL_CLOSE_CODES = (1000, 1001)


def _close_reason(err: ConnectionClosed) -> str | None:
    received = getattr(err, "rcvd", None)
    reason = getattr(received, "reason", None)
    return reason or None


def _api_error_reason(err: errors.APIError) -> str | None:
    # A websocket close is re-raised by the SDK with the close reason as details
    if isinstance(err.details, str):
        return err.details or None
    return err.message or None


class GenaiSessionHandle:
    """Wrap a google-genai AsyncSession and its connect context manager."""

    def __init__(self, session: Any, session_context: Any, callbacks: LiveCallbacks) -> None:
        self._session = session
        self._session_context = session_context
        self._callbacks = callbacks
        self._receive_task: asyncio.Task | None = None
        self._closed = False
        self._close_notified = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Start the background receive task."""
        self._receive_task = asyncio.create_task(self._receive_loop())

    async def send_client_content(
        self,
        *,
        turns: types.Content | Sequence[types.Content],
        turn_complete: bool = True,
    ) -> None:
        await self._session.send_client_content(turns=turns, turn_complete=turn_complete)

    async def send_realtime_input(self, *, media: types.Blob) -> None:
        await self._session.send_realtime_input(media=media)

    async def send_tool_response(
        self,
        *,
        function_responses: Sequence[types.FunctionResponse],
    ) -> None:
        await self._session.send_tool_response(function_responses=list(function_responses))

    async def close(self) -> None:
        """Stop receiving, close the SDK session and report the close once."""
        if self._closed:
            return
        self._closed = True

        task = self._receive_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        await self._exit_context()
        await self._notify_close(None)

    async def _exit_context(self) -> None:
        if self._session_context is None:
            return
        session_context, self._session_context = self._session_context, None
        try:
            await session_context.__aexit__(None, None, None)
        except Exception as e:
            _LOGGER.debug("Error closing session context: %s", e)

    async def _notify_close(self, reason: str | None) -> None:
        if self._close_notified:
            return
        self._close_notified = True
        await self._callbacks.on_close(reason)

    async def _receive_loop(self) -> None:
        """Forward every server message to on_message until the stream ends.

        ``AsyncSession.receive()`` stops after each completed turn, so it is
        re-entered until the session closes.
        """
        reason: str | None = None
        try:
            await self._callbacks.on_open()
            while not self._closed:
                received = False
                async for message in self._session.receive():
                    received = True
                    await self._callbacks.on_message(message)
                    if self._closed:
                        break
                if not received:
                    _LOGGER.debug("Receive stream ended without messages")
                    break
        except errors.APIError as err:
            reason = _api_error_reason(err)
            if err.code in NORMAL_CLOSE_CODES:
                _LOGGER.debug("Live session closed by server: %s", err)
            else:
                reason = reason or str(err)
                if not self._closed:
                    await self._callbacks.on_error(err)
        except ConnectionClosedOK as err:
            reason = _close_reason(err)
            _LOGGER.debug("Live session closed by server: %s", err)
        except ConnectionClosed as err:
            reason = _close_reason(err) or str(err)
            if not self._closed:
                await self._callbacks.on_error(err)
        except Exception as err:
            reason = str(err) or type(err).__name__
            if not self._closed:
                _LOGGER.debug("Receive loop exception", exc_info=True)
                await self._callbacks.on_error(err)

        if self._closed:
            return
        # Server-side end of the session
        self._closed = True
        await self._exit_context()
        await self._notify_close(reason)


class GenaiLiveTransport:
    """Open Gemini Live sessions with google-genai."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        api_version: str | None = None,
        client: genai.Client | None = None,
    ) -> None:
        """Initialize the transport.

        Without an API key the SDK falls back to GOOGLE_API_KEY / GEMINI_API_KEY.
        """
        self._api_key = api_key
        self._api_version = api_version
        self._client = client

    def _create_client(self) -> genai.Client:
        kwargs: dict[str, Any] = {}
        if self._api_key:
            kwargs["api_key"] = self._api_key
        if self._api_version:
            kwargs["http_options"] = {"api_version": self._api_version}
        return genai.Client(**kwargs)

    async def _get_client(self) -> genai.Client:
        if self._client is None:
            # Create client in executor to avoid blocking SSL operations
            loop = asyncio.get_running_loop()
            self._client = await loop.run_in_executor(None, self._create_client)
        return self._client

    async def open(
        self,
        model: str,
        config: types.LiveConnectConfig,
        callbacks: LiveCallbacks,
    ) -> GenaiSessionHandle:
        client = await self._get_client()

        # Keep the context manager reference; the handle exits it on close
        session_context = client.aio.live.connect(model=model, config=config)
        session = await session_context.__aenter__()
        _LOGGER.info("Opened Gemini Live session (model=%s)", model)

        handle = GenaiSessionHandle(session, session_context, callbacks)
        handle.start()
        return handle
