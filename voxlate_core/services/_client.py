"""Shared helpers for talking to the Google REST endpoints."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any, Final

import httpx
from dotenv import load_dotenv

from ..config import load_api_key_file
from ..errors import ConfigurationError, ServiceError

LOGGER = logging.getLogger(__name__)

HTTP_TIMEOUT_SECONDS: Final[float] = 30.0


@lru_cache(maxsize=1)
def get_http_client() -> httpx.Client:
    """Return a cached HTTP client shared by every service call."""

    LOGGER.debug("Initialising HTTP client")
    return httpx.Client(timeout=HTTP_TIMEOUT_SECONDS)


def get_api_key() -> str:
    """Return the Google API key from the environment or the key file."""

    load_dotenv()
    api_key = os.getenv("GOOGLE_API_KEY") or load_api_key_file()
    if not api_key:
        raise ConfigurationError("GOOGLE_API_KEY is not configured")
    return api_key


def request_json(
    method: str,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    json: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Send an authenticated request and return the decoded JSON body."""

    query = dict(params or {})
    query["key"] = get_api_key()
    client = get_http_client()
    try:
        response = client.request(method, url, params=query, json=json)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ServiceError(
            f"{method} {url} failed with HTTP {exc.response.status_code}: {_error_message(exc.response)}"
        ) from exc
    except httpx.HTTPError as exc:
        raise ServiceError(f"{method} {url} failed: {exc}") from exc

    try:
        payload = response.json()
    except ValueError as exc:
        raise ServiceError(f"{method} {url} returned invalid JSON") from exc
    if not isinstance(payload, dict):
        raise ServiceError(f"{method} {url} returned an unexpected payload")
    LOGGER.debug("Received response from %s (status=%d)", url, response.status_code)
    return payload


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.reason_phrase


__all__ = ["get_http_client", "get_api_key", "request_json", "HTTP_TIMEOUT_SECONDS"]
