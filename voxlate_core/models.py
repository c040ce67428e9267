"""Value objects exchanged between services and the session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class LanguageEntry:
    """A translatable language as listed by the Translation API."""

    code: str
    name: str = ""

    @property
    def label(self) -> str:
        """Display name with an upper-cased first letter, falling back to the code."""
        text = self.name or self.code
        return text[:1].upper() + text[1:]

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "LanguageEntry":
        return cls(code=str(payload["language"]), name=str(payload.get("name") or ""))

    def to_mapping(self) -> dict[str, str]:
        return {"code": self.code, "name": self.name, "label": self.label}


@dataclass(frozen=True, slots=True)
class AudioFormat:
    """Recognition settings read from an audio payload's header."""

    encoding: str
    sample_rate: int
    channels: int
    duration: float


__all__ = ["LanguageEntry", "AudioFormat"]
