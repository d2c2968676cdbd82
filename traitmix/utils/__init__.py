"""Pure utility helpers with no dependency on traitmix models."""

from .callbacks import ProjectProgressCallback
from .resource_governor import ResourceGovernor, ResourceSnapshot

__all__ = [
    "ProjectProgressCallback",
    "ResourceGovernor",
    "ResourceSnapshot",
]
