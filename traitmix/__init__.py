"""traitmix: unique layered-image combination generator.

Builds per-project trait catalogs from layer folders, draws weighted
combinations, resolves exclusion rules, rejects blacklisted pairings and
duplicates, and composites the accepted combinations.
"""

__version__ = "0.3.0"

from .config import TraitmixConfig, get_config, configure
from .core.models import ProjectConfig, LayerConfig, load_project, load_projects
from .generation import (
    load_catalog,
    sample_combination,
    fingerprint,
    build_blacklist,
    load_blacklist,
    generate_project,
    generate_projects,
    write_project,
)

__all__ = [
    "__version__",
    "TraitmixConfig",
    "get_config",
    "configure",
    "ProjectConfig",
    "LayerConfig",
    "load_project",
    "load_projects",
    "load_catalog",
    "sample_combination",
    "fingerprint",
    "build_blacklist",
    "load_blacklist",
    "generate_project",
    "generate_projects",
    "write_project",
]
