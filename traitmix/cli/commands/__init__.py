"""CLI commands for traitmix."""

from . import (
    gen,
    clean,
    validate,
    config_cmd,
)

__all__ = [
    "gen",
    "clean",
    "validate",
    "config_cmd",
]
