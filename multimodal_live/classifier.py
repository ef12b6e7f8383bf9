"""Classification of inbound server messages into typed events.

Server messages arrive either as ``google.genai.types.LiveServerMessage``
instances or as plain mappings (snake_case or camelCase keys, as produced
by a JSON proxy). ``classify`` turns one message into exactly one
``ServerMessage`` variant; ``events_for`` maps that variant to the ordered
list of events, log entries included, that the client publishes.
"""
from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from .const import (
    AUDIO_MIME_PREFIX,
    LOG_SERVER_AUDIO,
    LOG_SERVER_CONTENT,
    LOG_SERVER_INTERRUPTED,
    LOG_SERVER_TOOL_CALL,
    LOG_SERVER_TOOL_CALL_CANCELLATION,
    LOG_SERVER_TURN_COMPLETE,
)
from .events import (
    AudioEvent,
    ContentEvent,
    InterruptedEvent,
    LiveEvent,
    LogEvent,
    ToolCallCancellationEvent,
    ToolCallEvent,
    TurnCompleteEvent,
)
from .models import (
    LiveFunctionCall,
    ModelTurn,
    ServerContentMessage,
    ServerMessage,
    StreamingLog,
    ToolCall,
    ToolCallCancellation,
    ToolCallCancellationMessage,
    ToolCallMessage,
    UnhandledMessage,
)

_LOGGER = logging.getLogger(__name__)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(word.title() for word in rest)


def _get(obj: Any, name: str) -> Any:
    """Read a field from an SDK model or a snake_case/camelCase mapping."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        if name in obj:
            return obj[name]
        return obj.get(_camel(name))
    return getattr(obj, name, None)


def _present_fields(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, Mapping):
        return tuple(str(k) for k, v in raw.items() if v is not None)
    values = getattr(raw, "__dict__", None) or {}
    return tuple(k for k, v in values.items() if v is not None and not k.startswith("_"))


def make_log(log_type: str, message: str | Mapping[str, Any]) -> LogEvent:
    """Create a timestamped streaming log event."""
    return LogEvent(StreamingLog(date=datetime.now(), type=log_type, message=message))


def is_audio_part(part: Any) -> bool:
    """Return True for inline-data parts carrying audio/pcm."""
    inline_data = _get(part, "inline_data")
    if inline_data is None:
        return False
    mime_type = _get(inline_data, "mime_type")
    return isinstance(mime_type, str) and mime_type.startswith(AUDIO_MIME_PREFIX)


def decode_payload(data: Any) -> bytes:
    """Return inline data as bytes, decoding base64 text when needed."""
    if isinstance(data, str):
        return base64.b64decode(data)
    return bytes(data)


def partition_parts(parts: list[Any]) -> tuple[list[Any], list[Any]]:
    """Split parts into (audio, other), both in original order.

    ``other`` is every part that is not one of the audio part objects,
    compared by identity.
    """
    audio_parts = [part for part in parts if is_audio_part(part)]
    audio_ids = {id(part) for part in audio_parts}
    other_parts = [part for part in parts if id(part) not in audio_ids]
    return audio_parts, other_parts


def classify(raw: Any) -> ServerMessage:
    """Decode one raw server message into its single matching variant."""
    tool_call = _get(raw, "tool_call")
    if tool_call is not None:
        function_calls = []
        for function_call in _get(tool_call, "function_calls") or []:
            call_id = _get(function_call, "id")
            name = _get(function_call, "name")
            if not call_id or not name:
                _LOGGER.debug("Dropping function call without id or name: %s", function_call)
                continue
            args = _get(function_call, "args") or {}
            function_calls.append(LiveFunctionCall(id=call_id, name=name, args=dict(args)))
        return ToolCallMessage(ToolCall(function_calls=function_calls))

    cancellation = _get(raw, "tool_call_cancellation")
    if cancellation is not None:
        ids = list(_get(cancellation, "ids") or [])
        return ToolCallCancellationMessage(ToolCallCancellation(ids=ids))

    server_content = _get(raw, "server_content")
    if server_content is not None:
        if _get(server_content, "interrupted"):
            return ServerContentMessage(interrupted=True)
        model_turn = _get(server_content, "model_turn")
        return ServerContentMessage(
            turn_complete=bool(_get(server_content, "turn_complete")),
            parts=list(_get(model_turn, "parts") or []),
        )

    return UnhandledMessage(fields=_present_fields(raw))


def events_for(message: ServerMessage) -> list[LiveEvent]:
    """Map a classified message to the events to publish, in order."""
    events: list[LiveEvent] = []

    if isinstance(message, ToolCallMessage):
        if message.tool_call.function_calls:
            events.append(make_log(LOG_SERVER_TOOL_CALL, {"toolCall": message.tool_call}))
            events.append(ToolCallEvent(message.tool_call))
        return events

    if isinstance(message, ToolCallCancellationMessage):
        events.append(
            make_log(LOG_SERVER_TOOL_CALL_CANCELLATION, {"cancellation": message.cancellation})
        )
        events.append(ToolCallCancellationEvent(message.cancellation))
        return events

    if isinstance(message, ServerContentMessage):
        if message.interrupted:
            events.append(make_log(LOG_SERVER_INTERRUPTED, "Model response interrupted"))
            events.append(InterruptedEvent())
            return events

        if message.turn_complete:
            events.append(make_log(LOG_SERVER_TURN_COMPLETE, "Turn complete"))
            events.append(TurnCompleteEvent())

        if message.parts:
            audio_parts, other_parts = partition_parts(message.parts)
            for part in audio_parts:
                payload = _get(_get(part, "inline_data"), "data")
                if not payload:
                    continue
                try:
                    data = decode_payload(payload)
                except (binascii.Error, TypeError) as err:
                    _LOGGER.debug("Dropping audio part with undecodable payload: %s", err)
                    continue
                events.append(AudioEvent(data))
                events.append(make_log(LOG_SERVER_AUDIO, f"audio buffer ({len(data)})"))

            if other_parts:
                model_turn = ModelTurn(parts=other_parts)
                events.append(ContentEvent(model_turn))
                events.append(make_log(LOG_SERVER_CONTENT, {"serverContent": model_turn}))
        return events

    _LOGGER.debug("Dropping unhandled server message (fields=%s)", ", ".join(message.fields))
    return events


def dispatch(raw: Any) -> list[LiveEvent]:
    """Classify a raw server message and return the events it produces."""
    return events_for(classify(raw))
