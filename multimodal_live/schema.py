"""Voluptuous schemas for configuration mappings and raw protocol requests.

Mappings use the camelCase wire shape of the Live API so configurations
written for other Live API clients can be loaded unchanged.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import voluptuous as vol

from .const import MODALITIES
from .exceptions import ConfigError


def _single_modality(value: Any) -> Any:
    """Unwrap a one-element modality list; reject anything longer."""
    if isinstance(value, (list, tuple)):
        if len(value) != 1:
            raise vol.Invalid("exactly one response modality is supported per session")
        return value[0]
    return value


RESPONSE_MODALITY_SCHEMA = vol.All(_single_modality, str, vol.Lower, vol.In(MODALITIES))

SPEECH_CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional("voiceConfig"): {
            vol.Optional("prebuiltVoiceConfig"): {
                vol.Required("voiceName"): str,
            },
        },
        vol.Optional("languageCode"): str,
    }
)

GENERATION_CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional("temperature"): vol.All(vol.Coerce(float), vol.Range(min=0.0, max=2.0)),
        vol.Optional("topP"): vol.All(vol.Coerce(float), vol.Range(min=0.0, max=1.0)),
        vol.Optional("topK"): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional("maxOutputTokens"): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional("candidateCount"): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional("presencePenalty"): vol.Coerce(float),
        vol.Optional("frequencyPenalty"): vol.Coerce(float),
        vol.Optional("seed"): vol.Coerce(int),
        vol.Optional("responseModalities"): RESPONSE_MODALITY_SCHEMA,
        vol.Optional("speechConfig"): SPEECH_CONFIG_SCHEMA,
    }
)

LIVE_CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required("model"): vol.All(str, vol.Length(min=1)),
        vol.Optional("systemInstruction"): vol.Any(str, dict),
        vol.Optional("generationConfig"): GENERATION_CONFIG_SCHEMA,
        vol.Optional("tools"): [dict],
    }
)

# Raw requests accepted by MultimodalLiveClient.send_direct
CLIENT_CONTENT_SCHEMA = vol.Schema(
    {
        vol.Required("turns"): vol.Any(list, dict),
        vol.Optional("turnComplete", default=True): bool,
    },
    extra=vol.ALLOW_EXTRA,
)

MEDIA_CHUNK_SCHEMA = vol.Schema(
    {
        vol.Required("mimeType"): str,
        vol.Required("data"): vol.Any(str, bytes),
    }
)

REALTIME_INPUT_SCHEMA = vol.Schema(
    {
        vol.Required("mediaChunks"): vol.Any([MEDIA_CHUNK_SCHEMA], MEDIA_CHUNK_SCHEMA),
    },
    extra=vol.ALLOW_EXTRA,
)

TOOL_RESPONSE_SCHEMA = vol.Schema(
    {
        vol.Required("functionResponses"): [
            vol.Schema(
                {
                    vol.Required("id"): str,
                    vol.Required("response"): dict,
                    vol.Optional("name"): str,
                }
            )
        ],
    },
    extra=vol.ALLOW_EXTRA,
)


def validate(schema: vol.Schema, data: Mapping[str, Any]) -> dict[str, Any]:
    """Run a schema, converting voluptuous errors to ConfigError."""
    try:
        return schema(dict(data))
    except vol.Invalid as err:
        raise ConfigError(str(err)) from err
