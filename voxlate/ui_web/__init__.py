"""Flask JSON API exposing a single translator session."""

from .app import create_app

__all__ = ["create_app"]
