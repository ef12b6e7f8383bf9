"""Session client for the Gemini Live API.

``MultimodalLiveClient`` owns at most one live session. It derives the
connect configuration, installs the transport callbacks, turns every
inbound server message into typed events and encodes the outbound
commands (client content, realtime media, tool responses).
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from .classifier import dispatch, make_log
from .config import build_connect_config
from .const import (
    LOG_CLIENT_CLOSE,
    LOG_CLIENT_OPEN,
    LOG_CLIENT_REALTIME_INPUT,
    LOG_CLIENT_SEND,
    LOG_CLIENT_TOOL_RESPONSE,
    LOG_SERVER_CLOSE,
    LOG_SERVER_ERROR,
)
from .encoder import (
    BlobLike,
    FunctionResponseLike,
    PartLike,
    function_responses_from,
    media_category,
    to_blob,
    to_content,
    to_function_response,
    user_content,
)
from .events import (
    CloseEvent,
    LiveEvent,
    LiveEventEmitter,
    LogEvent,
    OpenEvent,
    SetupCompleteEvent,
)
from .exceptions import AlreadyConnectedError, ConnectError, NotConnectedError
from .models import LiveConfig
from .schema import (
    CLIENT_CONTENT_SCHEMA,
    REALTIME_INPUT_SCHEMA,
    TOOL_RESPONSE_SCHEMA,
    validate,
)
from .transport import GenaiLiveTransport, LiveCallbacks, LiveSessionHandle, LiveTransport

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Disconnected:
    """No session is open."""


@dataclass(frozen=True)
class Open:
    """A session is open; ``token`` identifies the connect() call that opened it."""

    handle: LiveSessionHandle
    token: object


SessionState = Union[Disconnected, Open]

DISCONNECTED = Disconnected()


class MultimodalLiveClient(LiveEventEmitter):
    """Client for one bidirectional live session."""

    def __init__(
        self,
        transport: LiveTransport | None = None,
        *,
        api_key: str | None = None,
    ) -> None:
        """Initialize the client.

        Without a transport, sessions are opened through google-genai using
        ``api_key`` (or the SDK's environment lookup).
        """
        super().__init__()
        self._transport = transport or GenaiLiveTransport(api_key=api_key)
        self._state: SessionState = DISCONNECTED
        self._config: LiveConfig | None = None
        self._connecting = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def connected(self) -> bool:
        """Return connection status."""
        return isinstance(self._state, Open)

    def get_config(self) -> LiveConfig | None:
        """Return the configuration of the current or last connect() call."""
        return self._config

    async def log(self, log_type: str, message: str | Mapping[str, Any]) -> None:
        """Publish a streaming log entry."""
        await self._publish(make_log(log_type, message))

    async def _publish(self, event: LiveEvent) -> None:
        if isinstance(event, LogEvent):
            _LOGGER.debug("%s: %s", event.log.type, event.log.message)
        await self.emit(event)

    async def connect(self, config: LiveConfig | Mapping[str, Any]) -> bool:
        """Open a session.

        Returns True once the session is open. Raises ConnectError when the
        transport fails to open it and AlreadyConnectedError when a session
        is already open or opening on this client.
        """
        if self._connecting or isinstance(self._state, Open):
            raise AlreadyConnectedError()
        if isinstance(config, Mapping):
            config = LiveConfig.from_dict(config)

        self._config = config
        token = object()
        self._connecting = True
        try:
            connect_config = build_connect_config(config)
            handle = await self._transport.open(config.model, connect_config, self._callbacks(token))
        except Exception as err:
            error_message = str(err) or type(err).__name__
            _LOGGER.error("Failed to connect to live session: %s", error_message)
            await self.log(LOG_SERVER_ERROR, f"Connection error: {error_message}")
            raise ConnectError(error_message) from err
        finally:
            self._connecting = False

        self._state = Open(handle=handle, token=token)
        _LOGGER.info("Connected to live session (model=%s)", config.model)
        return True

    async def disconnect(self) -> bool:
        """Close the open session.

        Returns False, doing nothing, when no session is open.
        """
        state = self._state
        if not isinstance(state, Open):
            return False

        self._state = DISCONNECTED
        try:
            await state.handle.close()
        except Exception as err:
            _LOGGER.warning("Error closing live session: %s", err)
        await self.log(LOG_CLIENT_CLOSE, "Disconnected")
        return True

    def _callbacks(self, token: object) -> LiveCallbacks:
        async def on_open() -> None:
            await self.log(LOG_CLIENT_OPEN, "connected to socket")
            await self.emit(OpenEvent())
            await self.emit(SetupCompleteEvent())

        async def on_message(message: Any) -> None:
            for event in dispatch(message):
                await self._publish(event)

        async def on_error(error: BaseException) -> None:
            await self.log(LOG_SERVER_ERROR, f"Error: {error}")

        async def on_close(reason: str | None) -> None:
            detail = f"disconnected with reason: {reason}" if reason else "disconnected"
            await self.log(LOG_SERVER_CLOSE, detail)
            # A late close from a replaced session must not drop the current one
            if isinstance(self._state, Open) and self._state.token is token:
                self._state = DISCONNECTED
            await self.emit(CloseEvent(reason=reason))

        return LiveCallbacks(
            on_open=on_open,
            on_message=on_message,
            on_error=on_error,
            on_close=on_close,
        )

    def _require_open(self) -> Open:
        state = self._state
        if not isinstance(state, Open):
            raise NotConnectedError()
        return state

    async def send(self, parts: PartLike | Sequence[PartLike], turn_complete: bool = True) -> None:
        """Send one part or a list of parts as a user turn."""
        state = self._require_open()
        content = user_content(parts)

        try:
            await state.handle.send_client_content(turns=[content], turn_complete=turn_complete)
        except Exception as e:
            _LOGGER.error("Error sending content: %s", e)
            raise
        await self.log(LOG_CLIENT_SEND, {"content": content, "turnComplete": turn_complete})

    async def send_realtime_input(self, chunk: BlobLike) -> None:
        """Send realtime input such as audio/video."""
        state = self._require_open()
        media = to_blob(chunk)

        try:
            await state.handle.send_realtime_input(media=media)
        except Exception as e:
            _LOGGER.error("Error sending realtime input: %s", e)
            raise
        await self.log(LOG_CLIENT_REALTIME_INPUT, media_category(media))

    async def send_tool_response(
        self,
        function_responses: Sequence[FunctionResponseLike] | Mapping[str, Any],
    ) -> None:
        """Send the results of one or more function calls."""
        state = self._require_open()
        responses = function_responses_from(function_responses)

        try:
            await state.handle.send_tool_response(function_responses=responses)
        except Exception as e:
            _LOGGER.error("Error sending tool response: %s", e)
            raise
        await self.log(LOG_CLIENT_TOOL_RESPONSE, {"toolResponse": {"functionResponses": responses}})

    async def send_direct(self, request: Mapping[str, Any]) -> None:
        """Route a raw protocol request to the matching session call.

        Accepts ``clientContent``, ``realtimeInput`` (one media chunk or a
        list, sent one at a time) and ``toolResponse`` requests. ``setup``
        is ignored because connect() performs the setup.
        """
        state = self._require_open()

        if "clientContent" in request:
            payload = validate(CLIENT_CONTENT_SCHEMA, request["clientContent"])
            turns = payload["turns"]
            if not isinstance(turns, list):
                turns = [turns]
            await state.handle.send_client_content(
                turns=[to_content(turn) for turn in turns],
                turn_complete=payload["turnComplete"],
            )
        elif "realtimeInput" in request:
            payload = validate(REALTIME_INPUT_SCHEMA, request["realtimeInput"])
            chunks = payload["mediaChunks"]
            if not isinstance(chunks, list):
                chunks = [chunks]
            for chunk in chunks:
                await state.handle.send_realtime_input(media=to_blob(chunk))
        elif "toolResponse" in request:
            payload = validate(TOOL_RESPONSE_SCHEMA, request["toolResponse"])
            await state.handle.send_tool_response(
                function_responses=[to_function_response(r) for r in payload["functionResponses"]]
            )
        elif "setup" in request:
            _LOGGER.debug("Setup is handled by connect()")
        else:
            _LOGGER.warning("Unknown request type: %s", sorted(request))
