"""Translator session: wires capture, recognition, translation and speech to one state."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from .capture import AudioRecorder
from .config import Settings, load_settings, resolve_source_language
from .errors import BusyError, RecordingError, VoxlateError
from .models import LanguageEntry
from .pipeline import Stage, StageResult, run_stages
from .services import fetch_languages, order_catalog, speak, transcribe, translate
from .services.tts import SpeechHandle
from .state import (
    Action,
    CatalogLoaded,
    OperationFinished,
    OperationRejected,
    OperationStarted,
    RecordingStarted,
    RecordingStopped,
    SelectLanguages,
    SessionState,
    SetInputText,
    SwapLanguages,
    TranscriptReceived,
    TranslationReceived,
    reduce,
)

LOGGER = logging.getLogger(__name__)

RECORDING_MIME_TYPE = "audio/wav"


class TranslatorSession:
    """Owns the session state and runs every user operation against it.

    Network operations and recording transitions are single-flight: while one
    runs, ``state.busy`` is set and any other is rejected with
    :class:`~voxlate_core.errors.BusyError`. Failures never propagate; they are
    logged, reflected in ``state.status`` and returned as a failed
    :class:`~voxlate_core.pipeline.StageResult`.
    """

    def __init__(self, settings: Settings | None = None, recorder: AudioRecorder | None = None) -> None:
        self.settings = settings or load_settings()
        self.recorder = recorder or AudioRecorder(samplerate=self.settings.sample_rate)
        self.state = SessionState(
            source_lang=resolve_source_language(self.settings),
            target_lang=self.settings.target_language,
        )
        self.speech: SpeechHandle | None = None
        self._lock = threading.Lock()

    def dispatch(self, action: Action) -> SessionState:
        with self._lock:
            self.state = reduce(self.state, action)
            return self.state

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def load_catalog(self) -> StageResult[list[LanguageEntry]]:
        preferred = list(self.settings.preferred_languages)
        result = self._run(
            "load_catalog",
            self.settings.display_language,
            [
                ("fetch_languages", fetch_languages),
                ("order_catalog", lambda entries: order_catalog(entries, preferred)),
                ("publish_catalog", self._publish_catalog),
            ],
        )
        if not result.ok:
            LOGGER.warning("Language catalog unavailable; language selectors stay empty")
        return result

    def _publish_catalog(self, entries: list[LanguageEntry]) -> list[LanguageEntry]:
        self.dispatch(CatalogLoaded(tuple(entries)))
        LOGGER.info("Loaded %d languages", len(entries))
        return entries

    # ------------------------------------------------------------------
    # Text and languages
    # ------------------------------------------------------------------

    def set_text(self, text: str) -> SessionState:
        return self.dispatch(SetInputText(text))

    def select_languages(self, source: str | None = None, target: str | None = None) -> StageResult[SessionState]:
        try:
            return StageResult.success(self.dispatch(SelectLanguages(source=source, target=target)))
        except BusyError as exc:
            return self._reject(exc)

    def swap_languages(self) -> StageResult[SessionState]:
        try:
            state = self.dispatch(SwapLanguages())
        except BusyError as exc:
            return self._reject(exc)
        LOGGER.info("Swapped languages: %s -> %s", state.source_lang, state.target_lang)
        return StageResult.success(state)

    def translate(self) -> StageResult[str]:
        text = self.state.input_text
        if not text.strip():
            LOGGER.debug("Skipping translation of blank input")
            return StageResult.success(self.state.translated_text)
        return self._run("translate", text, [("translate", self._translate_stage)])

    def _translate_stage(self, text: str) -> str:
        state = self.state
        translated = translate(text, state.source_lang, state.target_lang)
        self.dispatch(TranslationReceived(translated))
        return translated

    # ------------------------------------------------------------------
    # Recording and transcription
    # ------------------------------------------------------------------

    def start_recording(self) -> StageResult[None]:
        try:
            self.dispatch(RecordingStarted())
        except VoxlateError as exc:
            return self._reject(exc)
        try:
            self.recorder.start()
        except VoxlateError as exc:
            LOGGER.warning("Could not start recording: %s", exc)
            self.dispatch(RecordingStopped(exc))
            return StageResult.failure(exc, stage="start_capture")
        return StageResult.success()

    def stop_recording(self) -> StageResult[str]:
        """Stop capturing, then transcribe and translate what was recorded."""
        if not self.state.is_recording:
            return self._reject(RecordingError("No recording in progress"))
        return self._run(
            "stop_recording",
            None,
            [
                ("stop_capture", self._stop_capture),
                ("read_audio", _read_recording),
                *self._transcription_stages(RECORDING_MIME_TYPE),
            ],
        )

    def transcribe_audio(self, audio: bytes, mimetype: str) -> StageResult[str]:
        """Transcribe an uploaded clip, then translate the transcript."""
        return self._run("transcribe", audio, self._transcription_stages(mimetype))

    def _transcription_stages(self, mimetype: str) -> list[Stage]:
        return [
            ("transcribe", lambda audio: transcribe(audio, mimetype, self.state.source_lang)),
            ("publish_transcript", self._publish_transcript),
            ("translate", self._translate_stage),
        ]

    def _stop_capture(self, _value: object) -> Path:
        try:
            return self.recorder.stop()
        finally:
            self.dispatch(RecordingStopped())

    def _publish_transcript(self, transcript: str) -> str:
        self.dispatch(TranscriptReceived(transcript))
        return transcript

    # ------------------------------------------------------------------
    # Speech
    # ------------------------------------------------------------------

    def speak(self) -> SpeechHandle | None:
        text = self.state.translated_text
        if not text.strip():
            LOGGER.debug("Nothing to speak")
            return None
        self.stop_speaking()
        self.speech = speak(text, self.state.target_lang, self.settings.speech_rate)
        return self.speech

    def stop_speaking(self) -> bool:
        handle, self.speech = self.speech, None
        if handle is None or not handle.active:
            return False
        handle.cancel()
        return True

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def apply_settings(self, settings: Settings) -> None:
        """Adopt *settings*, updating the active languages and catalog when they changed."""
        previous, self.settings = self.settings, settings
        if not self.recorder.is_recording:
            self.recorder.samplerate = settings.sample_rate

        if (previous.source_language, previous.target_language) != (
            settings.source_language,
            settings.target_language,
        ):
            self.select_languages(resolve_source_language(settings), settings.target_language)
        if (previous.display_language, previous.preferred_languages) != (
            settings.display_language,
            settings.preferred_languages,
        ):
            self.load_catalog()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _run(self, name: str, value: object, stages: list[Stage]) -> StageResult:
        try:
            self.dispatch(OperationStarted(name))
        except BusyError as exc:
            return self._reject(exc)

        LOGGER.info("Running %s", name)
        error: VoxlateError | None = None
        try:
            result = run_stages(value, stages)
            error = result.error
        finally:
            self.dispatch(OperationFinished(error))
        return result

    def _reject(self, exc: VoxlateError) -> StageResult:
        LOGGER.warning("Rejected operation: %s", exc)
        self.dispatch(OperationRejected(exc))
        return StageResult.failure(exc)


def _read_recording(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise RecordingError(f"Could not read recording {path}: {exc}") from exc
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError:  # pragma: no cover - best effort cleanup
            LOGGER.warning("Failed to remove temporary recording file: %s", path)


__all__ = ["TranslatorSession"]
