"""Speech-to-text helper functions."""

from __future__ import annotations

import base64
import io
import logging
from typing import Any, Final

import soundfile as sf

from ..errors import EmptyResponseError, TranscriptionError
from ..models import AudioFormat
from ._client import request_json

LOGGER = logging.getLogger(__name__)

SPEECH_URL: Final[str] = "https://speech.googleapis.com/v1/speech:recognize"
ALLOWED_MIME_TYPES: Final[set[str]] = {
    "audio/wav",
    "audio/x-wav",
    "audio/webm",
    "audio/ogg",
    "audio/flac",
}
WAV_MIME_TYPES: Final[set[str]] = {"audio/wav", "audio/x-wav"}
# speech:recognize only accepts up to one minute of synchronous audio.
MAX_AUDIO_DURATION_SECONDS: Final[int] = 60
CONVERSION_SAMPLE_RATE: Final[int] = 16000
LOCALE_BY_LANGUAGE: Final[dict[str, str]] = {
    "es": "es-ES",
    "en": "en-US",
}
DEFAULT_LOCALE: Final[str] = "es-ES"


def locale_for(language: str | None) -> str:
    """Map a source language code to the recognition locale tag."""
    return LOCALE_BY_LANGUAGE.get(language or "", DEFAULT_LOCALE)


def transcribe(audio: bytes, mimetype: str, language: str | None) -> str:
    """Transcribe audio bytes with Google Speech-to-Text and return the best transcript."""

    LOGGER.info("Transcribing audio blob (mimetype=%s, language=%s)", mimetype, language)
    prepared = prepare_audio(audio, mimetype)
    audio_format = describe_audio(prepared)
    if audio_format.duration > MAX_AUDIO_DURATION_SECONDS:
        raise TranscriptionError(f"Audio duration exceeds the {MAX_AUDIO_DURATION_SECONDS} second limit")

    config: dict[str, Any] = {
        "encoding": audio_format.encoding,
        "sampleRateHertz": audio_format.sample_rate,
        "languageCode": locale_for(language),
    }
    if audio_format.channels > 1:
        config["audioChannelCount"] = audio_format.channels

    payload = request_json(
        "POST",
        SPEECH_URL,
        json={
            "config": config,
            "audio": {"content": base64.b64encode(prepared).decode("ascii")},
        },
    )
    transcript = _first_transcript(payload)
    LOGGER.debug("Received transcription response (%d characters)", len(transcript))
    return transcript


def prepare_audio(audio: bytes, mimetype: str) -> bytes:
    """Return *audio* in a container and encoding the recognizer accepts."""

    if mimetype not in ALLOWED_MIME_TYPES:
        raise TranscriptionError(f"Unsupported audio mimetype: {mimetype}")
    if not audio:
        raise TranscriptionError("Audio payload is empty")
    if mimetype == "audio/flac":
        return audio
    if mimetype in WAV_MIME_TYPES:
        return _as_linear16(audio)
    try:
        from pydub import AudioSegment
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise TranscriptionError("pydub is required to decode compressed uploads") from exc

    format_hint = "webm" if mimetype == "audio/webm" else "ogg"
    try:
        segment = AudioSegment.from_file(io.BytesIO(audio), format=format_hint)
    except Exception as exc:  # pydub surfaces ffmpeg failures as assorted errors
        raise TranscriptionError(f"Could not decode {mimetype} audio") from exc
    LOGGER.debug("Decoded %s audio via pydub (duration=%.2fs)", mimetype, segment.duration_seconds)
    mono = segment.set_channels(1).set_frame_rate(CONVERSION_SAMPLE_RATE).set_sample_width(2)
    wav_buffer = io.BytesIO()
    mono.export(wav_buffer, format="wav")
    return wav_buffer.getvalue()


def describe_audio(audio: bytes) -> AudioFormat:
    """Read encoding, rate, channel count and duration from the audio header."""

    try:
        with sf.SoundFile(io.BytesIO(audio)) as data:
            frames = len(data)
            samplerate = data.samplerate or 1
            channels = data.channels
            container = data.format
            subtype = data.subtype
    except RuntimeError as exc:
        raise TranscriptionError("Could not read the audio header") from exc

    if container == "FLAC":
        encoding = "FLAC"
    elif container == "WAV" and subtype == "PCM_16":
        encoding = "LINEAR16"
    else:
        raise TranscriptionError(f"Unsupported audio encoding: {container}/{subtype}")
    return AudioFormat(
        encoding=encoding,
        sample_rate=samplerate,
        channels=channels,
        duration=frames / samplerate,
    )


def _as_linear16(audio: bytes) -> bytes:
    try:
        with sf.SoundFile(io.BytesIO(audio)) as data:
            if data.subtype == "PCM_16":
                return audio
            samplerate = data.samplerate
            frames = data.read(dtype="int16")
    except RuntimeError as exc:
        raise TranscriptionError("Could not decode WAV audio") from exc
    LOGGER.debug("Re-encoding WAV audio as 16-bit PCM")
    buffer = io.BytesIO()
    sf.write(buffer, frames, samplerate, format="WAV", subtype="PCM_16")
    return buffer.getvalue()


def _first_transcript(payload: dict[str, Any]) -> str:
    try:
        transcript = payload["results"][0]["alternatives"][0].get("transcript", "")
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise EmptyResponseError("No transcript in recognition response") from exc
    transcript = str(transcript or "").strip()
    if not transcript:
        raise EmptyResponseError("No transcript in recognition response")
    return transcript


__all__ = [
    "ALLOWED_MIME_TYPES",
    "MAX_AUDIO_DURATION_SECONDS",
    "LOCALE_BY_LANGUAGE",
    "DEFAULT_LOCALE",
    "describe_audio",
    "locale_for",
    "prepare_audio",
    "transcribe",
]
