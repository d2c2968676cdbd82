"""Document models for traitmix projects and blacklists."""

from .project import (
    ExclusionRule,
    LayerConfig,
    ProjectConfig,
    BlacklistRule,
    BlacklistDocument,
    load_project,
    load_projects,
    PROJECT_SUFFIXES,
)

__all__ = [
    "ExclusionRule",
    "LayerConfig",
    "ProjectConfig",
    "BlacklistRule",
    "BlacklistDocument",
    "load_project",
    "load_projects",
    "PROJECT_SUFFIXES",
]
