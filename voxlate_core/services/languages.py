"""Supported-language catalog helpers."""

from __future__ import annotations

import logging
from typing import Final, Iterable, Sequence

from ..errors import EmptyResponseError
from ..models import LanguageEntry
from ._client import request_json

LOGGER = logging.getLogger(__name__)

LANGUAGES_URL: Final[str] = "https://translation.googleapis.com/language/translate/v2/languages"
DEFAULT_DISPLAY_LANGUAGE: Final[str] = "es"


def fetch_languages(display_language: str = DEFAULT_DISPLAY_LANGUAGE) -> list[LanguageEntry]:
    """Fetch the supported languages with names rendered in *display_language*."""

    LOGGER.info("Fetching language catalog (display=%s)", display_language)
    payload = request_json("GET", LANGUAGES_URL, params={"target": display_language})
    try:
        languages = payload["data"]["languages"]
        entries = [LanguageEntry.from_mapping(item) for item in languages]
    except (KeyError, TypeError) as exc:
        raise EmptyResponseError("Language list response is malformed") from exc
    LOGGER.debug("Received %d languages", len(entries))
    return entries


def order_catalog(entries: Iterable[LanguageEntry], preferred: Sequence[str]) -> list[LanguageEntry]:
    """Move the first entry of each *preferred* code to the front, keeping the rest in order."""

    items = list(entries)
    head: list[LanguageEntry] = []
    for code in preferred:
        match = next((entry for entry in items if entry.code == code), None)
        if match is not None and match not in head:
            head.append(match)
    wanted = set(preferred)
    return head + [entry for entry in items if entry.code not in wanted]


__all__ = ["fetch_languages", "order_catalog", "LANGUAGES_URL"]
