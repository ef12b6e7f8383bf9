"""Conversion of outbound application data into google-genai request types."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Union

from google.genai import types

from .classifier import decode_payload
from .models import LiveFunctionResponse

PartLike = Union[types.Part, Mapping[str, Any], str]
BlobLike = Union[types.Blob, Mapping[str, Any]]
FunctionResponseLike = Union[LiveFunctionResponse, types.FunctionResponse, Mapping[str, Any]]


def to_part(part: PartLike) -> types.Part:
    """Convert a part, a part mapping or plain text into a Part."""
    if isinstance(part, types.Part):
        return part
    if isinstance(part, str):
        return types.Part(text=part)
    if isinstance(part, Mapping):
        data = dict(part)
        inline_data = data.get("inline_data", data.get("inlineData"))
        if isinstance(inline_data, Mapping):
            data.pop("inlineData", None)
            data["inline_data"] = to_blob(inline_data)
        return types.Part.model_validate(data)
    raise TypeError(f"Unsupported part type: {type(part).__name__}")


def user_content(parts: PartLike | Sequence[PartLike]) -> types.Content:
    """Wrap one part or a list of parts as a user turn."""
    if isinstance(parts, (list, tuple)):
        items = list(parts)
    else:
        items = [parts]
    return types.Content(role="user", parts=[to_part(p) for p in items])


def to_content(turn: types.Content | Mapping[str, Any]) -> types.Content:
    """Convert a raw turn mapping into Content."""
    if isinstance(turn, types.Content):
        return turn
    data = dict(turn)
    return types.Content(role=data.get("role"), parts=[to_part(p) for p in data.get("parts") or []])


def to_blob(chunk: BlobLike) -> types.Blob:
    """Convert a media chunk into a Blob; base64 text payloads are decoded."""
    if isinstance(chunk, types.Blob):
        return chunk
    if isinstance(chunk, Mapping):
        mime_type = chunk.get("mime_type", chunk.get("mimeType"))
        data = chunk.get("data")
        return types.Blob(
            mime_type=mime_type,
            data=decode_payload(data) if data is not None else None,
        )
    raise TypeError(f"Unsupported media chunk type: {type(chunk).__name__}")


def media_category(chunk: types.Blob) -> str:
    """Return the primary mime component ("audio", "video", ...) of a chunk."""
    if chunk.mime_type:
        return chunk.mime_type.split("/")[0]
    return "unknown"


def to_function_response(response: FunctionResponseLike) -> types.FunctionResponse:
    """Convert a tool result into the {id, response} shape the API expects."""
    if isinstance(response, types.FunctionResponse):
        return response
    if isinstance(response, LiveFunctionResponse):
        call_id, name, payload = response.id, response.name, response.response
    elif isinstance(response, Mapping):
        call_id, name, payload = response.get("id"), response.get("name"), response.get("response")
    else:
        raise TypeError(f"Unsupported function response type: {type(response).__name__}")
    return types.FunctionResponse(id=call_id, name=name, response=dict(payload or {}))


def function_responses_from(
    function_responses: Sequence[FunctionResponseLike] | Mapping[str, Any],
) -> list[types.FunctionResponse]:
    """Accept a list of responses or a {functionResponses: [...]} mapping."""
    if isinstance(function_responses, Mapping):
        items = function_responses.get(
            "functionResponses", function_responses.get("function_responses", [])
        )
    else:
        items = function_responses
    return [to_function_response(r) for r in items]
