"""Text-to-speech helpers backed by the platform speech engine."""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable

import pyttsx3

LOGGER = logging.getLogger(__name__)


class SpeechHandle:
    """A background utterance that can be cancelled while it plays."""

    def __init__(self, text: str, language: str, rate: int | None = None) -> None:
        self.text = text
        self.language = language
        self.rate = rate
        self._engine: Any = None
        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name="voxlate-speech", daemon=True)

    def start(self) -> "SpeechHandle":
        self._thread.start()
        return self

    @property
    def active(self) -> bool:
        return self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop the utterance; a no-op once it has finished."""
        self._cancelled.set()
        with self._lock:
            engine = self._engine
        if engine is not None:
            LOGGER.info("Cancelling speech in %s", self.language)
            engine.stop()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the utterance ends; return ``True`` when it has."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        try:
            engine = pyttsx3.init()
            with self._lock:
                self._engine = engine
            if self._cancelled.is_set():
                return
            voice = select_voice(engine.getProperty("voices") or [], self.language)
            if voice is not None:
                engine.setProperty("voice", voice.id)
            else:
                LOGGER.debug("No installed voice for %s; using the default voice", self.language)
            if self.rate:
                engine.setProperty("rate", self.rate)
            engine.say(self.text)
            engine.runAndWait()
        except Exception:
            LOGGER.exception("Speech synthesis failed")
        finally:
            with self._lock:
                self._engine = None


def speak(text: str, language: str, rate: int | None = None) -> SpeechHandle:
    """Start speaking *text* in *language* and return immediately."""

    clean = text.strip()
    if not clean:
        raise ValueError("Cannot speak empty text")
    LOGGER.info("Speaking %d characters in %s", len(clean), language)
    return SpeechHandle(clean, language, rate).start()


def select_voice(voices: Iterable[Any], language: str) -> Any | None:
    """Return the first voice advertising *language*, or ``None``."""

    wanted = language.lower().replace("_", "-")
    for voice in voices:
        for tag in getattr(voice, "languages", None) or []:
            normalized = _normalize_tag(tag)
            if normalized == wanted or normalized.startswith(wanted + "-"):
                return voice
    return None


def _normalize_tag(tag: Any) -> str:
    # espeak prefixes its tags with a priority byte, e.g. b"\x05en-us".
    if isinstance(tag, bytes):
        tag = tag.decode("utf-8", "ignore")
    text = "".join(ch for ch in str(tag) if ch.isalnum() or ch in "-_")
    return text.lower().replace("_", "-")


__all__ = ["SpeechHandle", "speak", "select_voice"]
