"""Typed callback protocols for progress reporting.

Plain functions and lambdas with a matching signature satisfy these
protocols; nothing needs to subclass them.
"""

from typing import Protocol


class ProjectProgressCallback(Protocol):
    """Callback for per-project progress (sampling, compositing).

    Called from worker threads; implementations must be thread-safe.

    Args:
        project: Project slug (its output folder name)
        current: Items completed so far
        total: Items expected
    """

    def __call__(self, project: str, current: int, total: int) -> None: ...
