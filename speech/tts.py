from __future__ import annotations  # Text-to-speech collaborator

import logging
from pathlib import Path
from typing import Callable

from config import LlmRoute, load_config, resolve_route
from errors import UpstreamFailure
from llm_gateway import LlmGatewayError, speak
from observability import span

logger = logging.getLogger(__name__)

TTS_KEY = "speech.tts"

Synthesizer = Callable[[str], bytes]


def synthesize_speech(text: str, *, route: LlmRoute) -> bytes:
    try:
        with span("collaborator.tts", route.name, chars=len(text)):
            return speak(text, cfg=route)
    except LlmGatewayError as exc:
        logger.error("Speech synthesis failed: %s", exc)
        raise UpstreamFailure("TTS unavailable") from exc


def unavailable_synthesizer(text: str) -> bytes:  # Used when AI collaborators are switched off
    raise UpstreamFailure("TTS unavailable")


def synthesizer_with_config(config_path: Path) -> Synthesizer:
    route = resolve_route(load_config(config_path), TTS_KEY)

    def _synthesize(text: str) -> bytes:
        return synthesize_speech(text, route=route)

    return _synthesize


__all__ = ["Synthesizer", "TTS_KEY", "synthesize_speech", "synthesizer_with_config", "unavailable_synthesizer"]
