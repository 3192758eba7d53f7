from __future__ import annotations  # Audio transcription collaborator

import hashlib
import logging
from pathlib import Path
from typing import Callable

from config import LlmRoute, load_config, resolve_route
from errors import UpstreamFailure
from llm_gateway import LlmGatewayError, transcribe
from observability import span

logger = logging.getLogger(__name__)

TRANSCRIBER_KEY = "speech.transcriber"

# Hints that the audio may mix Hindi and English
TRANSCRIPTION_HINT = "Hello, kaise ho? I am fine. Yeh ek mixed conversation hai. Please transcribe exactly as spoken."

Transcriber = Callable[[bytes, str], str]

MOCK_TRANSCRIPTS = [
    "I believe we need to consider both perspectives carefully before making a judgment.",
    "The evidence clearly shows that this approach has significant benefits.",
    "While there are valid concerns, the overall impact remains positive.",
    "We must prioritize long-term sustainability over short-term gains.",
]


def transcribe_audio(audio: bytes, filename: str, *, route: LlmRoute) -> str:
    """Transcribe an upload; failures surface as ``UpstreamFailure``, never a made-up transcript."""

    try:
        with span("collaborator.transcribe", route.name, bytes=len(audio)):
            return transcribe(audio, filename=filename, cfg=route, prompt=TRANSCRIPTION_HINT)
    except LlmGatewayError as exc:
        logger.error("Transcription failed: %s", exc)
        raise UpstreamFailure("Transcription failed") from exc


def mock_transcriber(audio: bytes, filename: str) -> str:
    digest = hashlib.sha256(audio).digest()
    return MOCK_TRANSCRIPTS[digest[0] % len(MOCK_TRANSCRIPTS)]


def transcriber_with_config(config_path: Path) -> Transcriber:  # Bind the configured route
    route = resolve_route(load_config(config_path), TRANSCRIBER_KEY)

    def _transcribe(audio: bytes, filename: str) -> str:
        return transcribe_audio(audio, filename, route=route)

    return _transcribe


__all__ = [
    "MOCK_TRANSCRIPTS",
    "TRANSCRIBER_KEY",
    "Transcriber",
    "mock_transcriber",
    "transcribe_audio",
    "transcriber_with_config",
]
