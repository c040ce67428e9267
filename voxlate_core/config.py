"""Configuration helpers shared by the core and the front-end."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
import json
import locale
import logging
import os
from typing import Any, Mapping

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path(os.environ.get("VOXLATE_HOME", Path.home() / ".voxlate"))
SETTINGS_PATH = CONFIG_DIR / "settings.json"
API_KEY_PATH = CONFIG_DIR / "api_key.json"

FALLBACK_SOURCE_LANGUAGE = "es"
DEFAULT_PREFERRED_LANGUAGES = ("es", "en")


@dataclass(slots=True)
class Settings:
    """Runtime configuration for a translator session."""

    source_language: str | None = None
    target_language: str = "en"
    preferred_languages: list[str] = field(default_factory=lambda: list(DEFAULT_PREFERRED_LANGUAGES))
    display_language: str = "es"
    sample_rate: int = 16000
    speech_rate: int | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Settings":
        """Create :class:`Settings` from any mapping."""
        preferred = payload.get("preferred_languages")
        if isinstance(preferred, str):
            preferred = [code.strip() for code in preferred.split(",")]
        if not preferred:
            preferred = list(DEFAULT_PREFERRED_LANGUAGES)
        return cls(
            source_language=coerce_optional_str(payload.get("source_language", payload.get("sourceLang"))),
            target_language=str(payload.get("target_language", payload.get("targetLang", "en")) or "en"),
            preferred_languages=[str(code) for code in preferred if code],
            display_language=str(payload.get("display_language", "es") or "es"),
            sample_rate=_coerce_int(payload.get("sample_rate"), 16000),
            speech_rate=_coerce_optional_int(payload.get("speech_rate")),
        )

    def to_mapping(self) -> dict[str, Any]:
        """Serialize to a mapping suitable for JSON dumps."""
        return asdict(self)


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults on any problem."""

    settings_path = path or SETTINGS_PATH
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        LOGGER.debug("No settings.json found at %s; using defaults", settings_path)
        return Settings()
    except OSError as exc:  # pragma: no cover - filesystem failure
        LOGGER.warning("Failed reading settings at %s: %s", settings_path, exc)
        return Settings()

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        LOGGER.warning("Invalid JSON in %s: %s", settings_path, exc)
        return Settings()
    if not isinstance(payload, dict):
        LOGGER.warning("Ignoring settings in %s: expected an object", settings_path)
        return Settings()

    return Settings.from_mapping(payload)


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Persist settings to disk in JSON format."""

    settings_path = path or SETTINGS_PATH
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(settings.to_mapping(), indent=2, sort_keys=True)
    settings_path.write_text(payload, encoding="utf-8")
    LOGGER.debug("Saved settings to %s", settings_path)


def load_api_key_file(path: Path | None = None) -> str | None:
    """Read the ``{"key": ...}`` credentials file, if present."""

    key_path = path or API_KEY_PATH
    try:
        payload = json.loads(key_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as exc:
        LOGGER.warning("Failed reading API key file %s: %s", key_path, exc)
        return None
    if not isinstance(payload, dict):
        return None
    return coerce_optional_str(payload.get("key"))


def resolve_source_language(settings: Settings) -> str:
    """Return the configured source language, else the device locale's language."""

    if settings.source_language:
        return settings.source_language
    tag = locale.getlocale()[0]
    if tag and tag not in ("C", "POSIX"):
        return tag.replace("-", "_").split("_", 1)[0].lower()
    return FALLBACK_SOURCE_LANGUAGE


def coerce_optional_str(value: Any) -> str | None:
    """Return *value* as a string, or ``None`` for an empty or ``"default"`` value."""
    if value in (None, "", "default"):
        return None
    return str(value)


def _coerce_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_optional_int(value: Any) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


__all__ = [
    "Settings",
    "load_settings",
    "save_settings",
    "load_api_key_file",
    "resolve_source_language",
    "coerce_optional_str",
    "CONFIG_DIR",
    "SETTINGS_PATH",
    "API_KEY_PATH",
]
