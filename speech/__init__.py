"""Speech collaborators: transcription and text-to-speech."""
from .transcriber import TRANSCRIBER_KEY, Transcriber, mock_transcriber, transcribe_audio, transcriber_with_config
from .tts import TTS_KEY, Synthesizer, synthesize_speech, synthesizer_with_config, unavailable_synthesizer

__all__ = [
    "TRANSCRIBER_KEY",
    "TTS_KEY",
    "Synthesizer",
    "Transcriber",
    "mock_transcriber",
    "synthesize_speech",
    "synthesizer_with_config",
    "transcribe_audio",
    "transcriber_with_config",
    "unavailable_synthesizer",
]
