"""Worker-count recommendations for the sampling and compositing pools."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ResourceSnapshot:
    cpu_count: int


class ResourceGovernor:
    """Computes safe worker counts from local machine resources.

    Args:
        max_workers: Hard cap from configuration (0 or None = no cap)
        safe_auto_workers: Leave one CPU free for the display thread
    """

    def __init__(
        self, max_workers: int | None = None, safe_auto_workers: bool = True
    ):
        self.max_workers = max_workers or 0
        self.safe_auto_workers = safe_auto_workers

    def snapshot(self) -> ResourceSnapshot:
        return ResourceSnapshot(cpu_count=max(1, os.cpu_count() or 1))

    def recommend_workers(self, units: int) -> int:
        """Threads to use for `units` independent pieces of work."""
        units = max(1, int(units))
        if self.max_workers > 0:
            return max(1, min(units, self.max_workers))

        snap = self.snapshot()
        cpu_cap = snap.cpu_count
        if self.safe_auto_workers:
            cpu_cap = max(1, cpu_cap - 1)
        return max(1, min(units, cpu_cap))
