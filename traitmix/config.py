"""Configuration management for traitmix.

Two groups of settings:
- paths: where project documents, the blacklist and outputs live
- generation: sampling/compositing knobs shared by every project in a run

Project documents (layers, amount, tolerance) are NOT part of this config;
they live in the configs folder and are loaded by traitmix.core.models.

Config resolution order (highest priority first):
1. Programmatic (TraitmixConfig constructed in code)
2. Environment variables (TRAITMIX_OUTPUT_DIR, TRAITMIX_MAX_WORKERS, etc.)
3. Config file (~/.config/traitmix/config.json, managed by `traitmix config`)
4. Hardcoded defaults
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


# =============================================================================
# Config file location
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "traitmix"
CONFIG_FILE = CONFIG_DIR / "config.json"


# =============================================================================
# Config dataclasses
# =============================================================================


@dataclass
class PathsConfig:
    """Default locations used by the CLI."""

    configs_dir: str = "configs"
    output_dir: str = "output"
    blacklist_file: str = "blacklist.json"


@dataclass
class GenerationConfig:
    """Sampling and compositing settings.

    - default_weight: weight of a trait file without a `#weight` suffix
    - max_workers: thread cap for sampling/compositing (0 = auto)
    - lock_timeout: seconds to wait for the uniqueness lock before failing
    """

    blacklist_case_sensitive: bool = False
    default_weight: int = 50
    image_extension: str = "png"
    max_workers: int = 0
    lock_timeout: float = 30.0


@dataclass
class TraitmixConfig:
    """Top-level traitmix configuration.

    Examples:
        # Package use
        config = TraitmixConfig(generation=GenerationConfig(max_workers=4))

        # CLI use: loads from ~/.config/traitmix/config.json
        config = TraitmixConfig.load()
    """

    paths: PathsConfig = field(default_factory=PathsConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)

    @classmethod
    def load(cls) -> "TraitmixConfig":
        """Load config from file + env vars.

        Priority: env var values > config.json values > defaults.
        """
        config = cls()

        # Layer 1: config file
        if CONFIG_FILE.exists():
            try:
                with open(CONFIG_FILE) as f:
                    data = json.load(f)
                _apply_dict(config, data)
            except (json.JSONDecodeError, OSError, TypeError, ValueError) as exc:
                logger.warning("Failed to load config from %s: %s", CONFIG_FILE, exc)

        # Layer 2: env var overrides
        if val := os.environ.get("TRAITMIX_CONFIGS_DIR"):
            config.paths.configs_dir = val
        if val := os.environ.get("TRAITMIX_OUTPUT_DIR"):
            config.paths.output_dir = val
        if val := os.environ.get("TRAITMIX_BLACKLIST_FILE"):
            config.paths.blacklist_file = val
        if val := os.environ.get("TRAITMIX_BLACKLIST_CASE_SENSITIVE"):
            config.generation.blacklist_case_sensitive = parse_bool(val)
        if val := os.environ.get("TRAITMIX_MAX_WORKERS"):
            try:
                config.generation.max_workers = int(val)
            except ValueError:
                logger.warning("Invalid TRAITMIX_MAX_WORKERS=%r, ignoring", val)
        if val := os.environ.get("TRAITMIX_DEFAULT_WEIGHT"):
            try:
                config.generation.default_weight = int(val)
            except ValueError:
                logger.warning("Invalid TRAITMIX_DEFAULT_WEIGHT=%r, ignoring", val)

        return config

    def save(self) -> None:
        """Save config to ~/.config/traitmix/config.json."""
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for display."""
        return {
            "paths": asdict(self.paths),
            "generation": asdict(self.generation),
        }


def parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_dict(config: TraitmixConfig, data: dict) -> None:
    """Apply a dict of values onto a TraitmixConfig."""
    if "paths" in data and isinstance(data["paths"], dict):
        for k, v in data["paths"].items():
            if hasattr(config.paths, k):
                setattr(config.paths, k, str(v))
    if "generation" in data and isinstance(data["generation"], dict):
        for k, v in data["generation"].items():
            if not hasattr(config.generation, k):
                continue
            current = getattr(config.generation, k)
            if isinstance(current, bool):
                v = parse_bool(v) if isinstance(v, str) else bool(v)
            elif isinstance(current, int):
                v = int(v)
            elif isinstance(current, float):
                v = float(v)
            setattr(config.generation, k, v)


# =============================================================================
# Global config singleton
# =============================================================================

_config: TraitmixConfig | None = None


def get_config() -> TraitmixConfig:
    """Get the global TraitmixConfig instance.

    First call loads from file + env vars. Subsequent calls return cached instance.
    """
    global _config
    if _config is None:
        _config = TraitmixConfig.load()
    return _config


def configure(config: TraitmixConfig) -> None:
    """Set the global TraitmixConfig programmatically."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global config (forces reload on next get_config())."""
    global _config
    _config = None
