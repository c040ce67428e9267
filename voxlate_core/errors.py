"""Error taxonomy shared by the services and the session."""

from __future__ import annotations


class VoxlateError(RuntimeError):
    """Base class for failures that are reported to the user and swallowed."""

    code = "error"
    status = "Something went wrong"


class ConfigurationError(VoxlateError):
    code = "not_configured"
    status = "The Google API key is not configured"


class PermissionDeniedError(VoxlateError):
    code = "permission_denied"
    status = "Microphone access was denied"


class RecordingError(VoxlateError):
    code = "recording_failed"
    status = "Recording failed"


class TranscriptionError(VoxlateError):
    """Raised when a transcription request fails validation."""

    code = "invalid_audio"
    status = "The recorded audio could not be used"


class ServiceError(VoxlateError):
    """Network or HTTP failure talking to a Google endpoint."""

    code = "service_unavailable"
    status = "The translation service is unavailable"


class EmptyResponseError(VoxlateError):
    code = "empty_response"
    status = "The service returned no result"


class BusyError(VoxlateError):
    code = "busy"
    status = "Another operation is still in progress"


__all__ = [
    "VoxlateError",
    "ConfigurationError",
    "PermissionDeniedError",
    "RecordingError",
    "TranscriptionError",
    "ServiceError",
    "EmptyResponseError",
    "BusyError",
]
