"""Derive the google-genai connect configuration from a LiveConfig."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from google.genai import types

from .const import MODALITY_AUDIO, MODALITY_IMAGE
from .models import LiveConfig, LiveGenerationConfig, SpeechConfig

_LOGGER = logging.getLogger(__name__)

# Generation parameters forwarded unchanged inside generation_config
_GENERATION_FIELDS = (
    "temperature",
    "top_p",
    "top_k",
    "max_output_tokens",
    "candidate_count",
    "presence_penalty",
    "frequency_penalty",
    "seed",
)


def to_modality(response_modalities: str | None) -> types.Modality:
    """Map a modality name to the SDK enum; anything unknown is TEXT."""
    if response_modalities == MODALITY_AUDIO:
        return types.Modality.AUDIO
    if response_modalities == MODALITY_IMAGE:
        return types.Modality.IMAGE
    return types.Modality.TEXT


def _speech_config(speech: SpeechConfig) -> types.SpeechConfig:
    voice_config = None
    if speech.voice_name:
        voice_config = types.VoiceConfig(
            prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=speech.voice_name)
        )
    return types.SpeechConfig(voice_config=voice_config, language_code=speech.language_code)


def _system_instruction(instruction: Any) -> Any:
    if isinstance(instruction, Mapping):
        return types.Content.model_validate(dict(instruction))
    return instruction


def _generation_config(gen: LiveGenerationConfig) -> types.GenerationConfig | None:
    params = {
        name: getattr(gen, name)
        for name in _GENERATION_FIELDS
        if getattr(gen, name) is not None
    }
    if not params:
        return None
    return types.GenerationConfig(**params)


def build_connect_config(config: LiveConfig) -> types.LiveConnectConfig:
    """Build LiveConnectConfig for the session.

    The response modality is lifted out of the generation parameters and
    sent once, as a one-element ``response_modalities`` list.
    """
    gen = config.generation_config or LiveGenerationConfig()

    config_kwargs: dict[str, Any] = {
        "response_modalities": [to_modality(gen.response_modalities)],
    }

    if config.system_instruction is not None:
        config_kwargs["system_instruction"] = _system_instruction(config.system_instruction)

    if config.tools:
        config_kwargs["tools"] = list(config.tools)

    if gen.speech_config is not None:
        config_kwargs["speech_config"] = _speech_config(gen.speech_config)

    generation_config = _generation_config(gen)
    if generation_config is not None:
        config_kwargs["generation_config"] = generation_config

    _LOGGER.debug(
        "build_connect_config: model=%s modality=%s keys=%s",
        config.model,
        gen.response_modalities,
        sorted(config_kwargs),
    )
    return types.LiveConnectConfig(**config_kwargs)
