"""Session state and the reducer that is its only mutator."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Union

from .errors import BusyError, RecordingError, VoxlateError
from .models import LanguageEntry


@dataclass(frozen=True, slots=True)
class SessionState:
    """Everything the screen shows for one translator session."""

    input_text: str = ""
    translated_text: str = ""
    source_lang: str = "es"
    target_lang: str = "en"
    is_recording: bool = False
    busy: bool = False
    status: str | None = None
    catalog: tuple[LanguageEntry, ...] = ()

    def to_mapping(self) -> dict[str, Any]:
        return {
            "inputText": self.input_text,
            "translatedText": self.translated_text,
            "sourceLang": self.source_lang,
            "targetLang": self.target_lang,
            "isRecording": self.is_recording,
            "busy": self.busy,
            "status": self.status,
        }


@dataclass(frozen=True, slots=True)
class SetInputText:
    text: str


@dataclass(frozen=True, slots=True)
class SelectLanguages:
    source: str | None = None
    target: str | None = None


@dataclass(frozen=True, slots=True)
class CatalogLoaded:
    entries: tuple[LanguageEntry, ...]


@dataclass(frozen=True, slots=True)
class RecordingStarted:
    pass


@dataclass(frozen=True, slots=True)
class RecordingStopped:
    error: VoxlateError | None = None


@dataclass(frozen=True, slots=True)
class OperationStarted:
    name: str


@dataclass(frozen=True, slots=True)
class OperationFinished:
    error: VoxlateError | None = None


@dataclass(frozen=True, slots=True)
class OperationRejected:
    error: VoxlateError


@dataclass(frozen=True, slots=True)
class TranscriptReceived:
    text: str


@dataclass(frozen=True, slots=True)
class TranslationReceived:
    text: str


@dataclass(frozen=True, slots=True)
class SwapLanguages:
    pass


Action = Union[
    SetInputText,
    SelectLanguages,
    CatalogLoaded,
    RecordingStarted,
    RecordingStopped,
    OperationStarted,
    OperationFinished,
    OperationRejected,
    TranscriptReceived,
    TranslationReceived,
    SwapLanguages,
]


def reduce(state: SessionState, action: Action) -> SessionState:
    """Return the state that follows *action*.

    Raises :class:`BusyError` or :class:`RecordingError` when *action* is not
    allowed in *state*; the state is then left untouched by the caller.
    """

    if isinstance(action, SetInputText):
        return replace(state, input_text=action.text)

    if isinstance(action, SelectLanguages):
        if state.busy:
            raise BusyError("Cannot change languages while an operation is running")
        return replace(
            state,
            source_lang=action.source or state.source_lang,
            target_lang=action.target or state.target_lang,
        )

    if isinstance(action, CatalogLoaded):
        return replace(state, catalog=tuple(action.entries))

    if isinstance(action, RecordingStarted):
        if state.is_recording:
            raise RecordingError("A recording is already in progress")
        if state.busy:
            raise BusyError("Cannot record while an operation is running")
        return replace(state, is_recording=True, status=None)

    if isinstance(action, RecordingStopped):
        status = action.error.status if action.error else state.status
        return replace(state, is_recording=False, status=status)

    if isinstance(action, OperationStarted):
        if state.busy:
            raise BusyError(f"Cannot start {action.name} while another operation is running")
        return replace(state, busy=True, status=None)

    if isinstance(action, OperationFinished):
        return replace(state, busy=False, status=action.error.status if action.error else None)

    if isinstance(action, OperationRejected):
        return replace(state, status=action.error.status)

    if isinstance(action, TranscriptReceived):
        return replace(state, input_text=action.text)

    if isinstance(action, TranslationReceived):
        return replace(state, translated_text=action.text)

    if isinstance(action, SwapLanguages):
        if state.busy:
            raise BusyError("Cannot swap languages while an operation is running")
        return replace(
            state,
            source_lang=state.target_lang,
            target_lang=state.source_lang,
            input_text=state.translated_text,
            translated_text=state.input_text,
        )

    raise TypeError(f"Unknown action: {action!r}")


__all__ = [
    "Action",
    "CatalogLoaded",
    "OperationFinished",
    "OperationRejected",
    "OperationStarted",
    "RecordingStarted",
    "RecordingStopped",
    "SelectLanguages",
    "SessionState",
    "SetInputText",
    "SwapLanguages",
    "TranscriptReceived",
    "TranslationReceived",
    "reduce",
]
