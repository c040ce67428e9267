"""Core services, session state and configuration for voxlate."""

from .config import Settings, load_settings, save_settings
from .errors import VoxlateError
from .models import LanguageEntry
from .session import TranslatorSession
from .state import SessionState

__all__ = [
    "LanguageEntry",
    "SessionState",
    "Settings",
    "TranslatorSession",
    "VoxlateError",
    "load_settings",
    "save_settings",
]
