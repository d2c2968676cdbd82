"""Command-line interface for traitmix."""

from .app import app

__all__ = ["app"]
