"""Service layer wrapping the Google REST endpoints and the speech engine."""

from .languages import fetch_languages, order_catalog
from .stt import (
    ALLOWED_MIME_TYPES,
    MAX_AUDIO_DURATION_SECONDS,
    describe_audio,
    locale_for,
    prepare_audio,
    transcribe,
)
from .translate import translate
from .tts import SpeechHandle, speak

__all__ = [
    "ALLOWED_MIME_TYPES",
    "MAX_AUDIO_DURATION_SECONDS",
    "SpeechHandle",
    "describe_audio",
    "fetch_languages",
    "locale_for",
    "order_catalog",
    "prepare_audio",
    "speak",
    "transcribe",
    "translate",
]
