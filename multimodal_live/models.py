"""Data model for live sessions: configuration, tool calls and server content."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from google.genai import types

from .const import DEFAULT_MODEL, MODALITY_TEXT
from .schema import LIVE_CONFIG_SCHEMA, validate


@dataclass(frozen=True)
class SpeechConfig:
    """Voice selection for audio responses."""

    voice_name: str | None = None
    language_code: str | None = None


@dataclass(frozen=True)
class LiveGenerationConfig:
    """Generation parameters for a live session.

    ``response_modalities`` holds exactly one modality name ("text", "audio"
    or "image"). It is lifted out of the generation parameters when the
    connect configuration is derived.
    """

    response_modalities: str = MODALITY_TEXT
    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    max_output_tokens: int | None = None
    candidate_count: int | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    seed: int | None = None
    speech_config: SpeechConfig | None = None


@dataclass(frozen=True)
class LiveConfig:
    """Configuration supplied to a single connect() call."""

    model: str = DEFAULT_MODEL
    system_instruction: str | types.Content | Mapping[str, Any] | None = None
    generation_config: LiveGenerationConfig | None = None
    tools: list[types.Tool | Mapping[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LiveConfig:
        """Build a config from the camelCase wire shape.

        Raises ConfigError when the mapping does not validate.
        """
        valid = validate(LIVE_CONFIG_SCHEMA, data)

        generation_config = None
        gen = valid.get("generationConfig")
        if gen is not None:
            speech_config = None
            speech = gen.get("speechConfig")
            if speech is not None:
                prebuilt = speech.get("voiceConfig", {}).get("prebuiltVoiceConfig", {})
                speech_config = SpeechConfig(
                    voice_name=prebuilt.get("voiceName"),
                    language_code=speech.get("languageCode"),
                )
            generation_config = LiveGenerationConfig(
                response_modalities=gen.get("responseModalities", MODALITY_TEXT),
                temperature=gen.get("temperature"),
                top_p=gen.get("topP"),
                top_k=gen.get("topK"),
                max_output_tokens=gen.get("maxOutputTokens"),
                candidate_count=gen.get("candidateCount"),
                presence_penalty=gen.get("presencePenalty"),
                frequency_penalty=gen.get("frequencyPenalty"),
                seed=gen.get("seed"),
                speech_config=speech_config,
            )

        return cls(
            model=valid["model"],
            system_instruction=valid.get("systemInstruction"),
            generation_config=generation_config,
            tools=list(valid.get("tools", [])),
        )


@dataclass(frozen=True)
class LiveFunctionCall:
    """A function call requested by the model."""

    id: str
    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolCall:
    """Function calls carried by one tool call message."""

    function_calls: list[LiveFunctionCall] = field(default_factory=list)


@dataclass(frozen=True)
class ToolCallCancellation:
    """Ids of previously issued tool calls the server no longer wants."""

    ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LiveFunctionResponse:
    """Result of a tool call, correlated by id."""

    id: str
    response: dict[str, Any]
    name: str | None = None


@dataclass(frozen=True)
class StreamingLog:
    """One entry of the diagnostic log stream."""

    date: datetime
    type: str
    message: str | Mapping[str, Any]
    count: int | None = None


@dataclass(frozen=True)
class ModelTurn:
    """Non-audio parts of a model turn."""

    parts: list[Any]


# Classified server messages


@dataclass(frozen=True)
class ToolCallMessage:
    """Tool call with malformed function calls already removed."""

    tool_call: ToolCall


@dataclass(frozen=True)
class ToolCallCancellationMessage:
    cancellation: ToolCallCancellation


@dataclass(frozen=True)
class ServerContentMessage:
    """Server content in evaluation order.

    When ``interrupted`` is set nothing else in the message is processed.
    """

    interrupted: bool = False
    turn_complete: bool = False
    parts: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class UnhandledMessage:
    """A message matching none of the handled kinds."""

    fields: tuple[str, ...] = ()


ServerMessage = Union[
    ToolCallMessage,
    ToolCallCancellationMessage,
    ServerContentMessage,
    UnhandledMessage,
]
