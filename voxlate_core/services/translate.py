"""Translation helper functions."""

from __future__ import annotations

import logging
from typing import Final

from ..errors import EmptyResponseError
from ._client import request_json

LOGGER = logging.getLogger(__name__)

TRANSLATE_URL: Final[str] = "https://translation.googleapis.com/language/translate/v2"
TEXT_FORMAT: Final[str] = "text"


def translate(text: str, source_lang: str, target_lang: str) -> str:
    """Translate *text* from *source_lang* into *target_lang* with Google Translate."""

    if not text.strip():
        return ""
    LOGGER.info("Translating text from %s to %s", source_lang, target_lang)

    payload = request_json(
        "POST",
        TRANSLATE_URL,
        params={
            "q": text,
            "source": source_lang,
            "target": target_lang,
            "format": TEXT_FORMAT,
        },
    )
    try:
        translated = payload["data"]["translations"][0]["translatedText"]
    except (KeyError, IndexError, TypeError) as exc:
        raise EmptyResponseError("No translation in response") from exc
    if not isinstance(translated, str) or not translated:
        raise EmptyResponseError("No translation in response")
    LOGGER.debug("Received translation response (%d characters)", len(translated))
    return translated


__all__ = ["translate", "TRANSLATE_URL"]
