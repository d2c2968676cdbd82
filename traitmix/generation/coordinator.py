"""Bounded-retry generation of unique combinations across projects.

Each project runs its own sampling loop on a worker thread. All projects of
a run share one UniquenessSet, so no fingerprint is accepted twice anywhere
in the run. Rejections (blacklisted or duplicate) are counted cumulatively
per project; once they exceed the project's tolerance the project fails
with ToleranceExceeded, its fingerprints are released from the shared set,
and sibling projects carry on.
"""

import logging
import random
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from ..core.errors import (
    CatalogError,
    GenerationFailed,
    LockAcquisitionFailure,
    ToleranceExceeded,
)
from ..core.models import ProjectConfig
from ..utils.callbacks import ProjectProgressCallback
from ..utils.resource_governor import ResourceGovernor
from .blacklist import BlacklistTable, is_rejected
from .catalog import DEFAULT_WEIGHT, TraitCatalog, load_catalog
from .fingerprint import fingerprint
from .sampler import sample_combination

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 30.0


class UniquenessSet:
    """Fingerprints accepted so far, guarded by a single lock.

    Only atomic operations are exposed; there is no separate membership test.
    """

    def __init__(self, lock_timeout: float = DEFAULT_LOCK_TIMEOUT):
        self.lock_timeout = lock_timeout
        self._fingerprints: set[str] = set()
        self._lock = threading.Lock()

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self.lock_timeout):
            raise LockAcquisitionFailure(self.lock_timeout)
        try:
            yield
        finally:
            self._lock.release()

    def insert_if_absent(self, fp: str) -> bool:
        """Add `fp`; return False if it was already present."""
        with self._locked():
            if fp in self._fingerprints:
                return False
            self._fingerprints.add(fp)
            return True

    def release(self, fps: Iterable[str]) -> None:
        """Forget fingerprints of a failed project."""
        with self._locked():
            self._fingerprints.difference_update(fps)

    def __len__(self) -> int:
        with self._locked():
            return len(self._fingerprints)


@dataclass
class ProjectResult:
    """Outcome of a successful project run."""

    project: ProjectConfig
    catalog: TraitCatalog
    accepted: list[tuple[tuple[int, ...], str]] = field(default_factory=list)
    attempts: int = 0
    duplicates: int = 0
    blacklisted: int = 0
    seed: int | None = None

    @property
    def rejections(self) -> int:
        return self.duplicates + self.blacklisted

    @property
    def fingerprints(self) -> list[str]:
        return [fp for _, fp in self.accepted]

    def trait_counts(self) -> dict[str, dict[str, int]]:
        """Layer label -> trait name -> occurrences among accepted combinations.

        No-trait selections are counted under "None".
        """
        counts: dict[str, Counter] = {
            layer.label: Counter() for layer in self.catalog.layers
        }
        for indices, _ in self.accepted:
            for layer, trait_index in zip(self.catalog.layers, indices):
                t = layer.traits[trait_index]
                counts[layer.label][t.name if t.is_visual else "None"] += 1
        return {label: dict(c) for label, c in counts.items()}


@dataclass
class GenerationRun:
    """Outcome of a multi-project run."""

    results: dict[str, ProjectResult] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)
    seed: int | None = None

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        """Raise GenerationFailed if any project failed."""
        if self.failures:
            raise GenerationFailed(self.failures)


def generate_project(
    project: ProjectConfig,
    catalog: TraitCatalog,
    uniques: UniquenessSet,
    blacklist: BlacklistTable | None = None,
    rng: random.Random | None = None,
    on_progress: ProjectProgressCallback | None = None,
    amount: int | None = None,
    tolerance: int | None = None,
) -> ProjectResult:
    """Sample until `amount` unique combinations are accepted.

    Args:
        project: Project being generated (amount/tolerance defaults)
        catalog: The project's loaded catalog
        uniques: Uniqueness set shared by every project of the run
        blacklist: Optional blacklist table
        rng: Random source (seeded for reproducibility)
        on_progress: Optional callback(project, accepted, amount)
        amount: Override of project.amount
        tolerance: Override of project.tolerance

    Returns:
        ProjectResult with accepted (indices, fingerprint) pairs in draw order

    Raises:
        ToleranceExceeded: When rejections exceed the tolerance
        LockAcquisitionFailure: If the uniqueness lock can't be acquired
    """
    amount = project.amount if amount is None else amount
    tolerance = project.tolerance if tolerance is None else tolerance
    rng = rng or random.Random()
    result = ProjectResult(project=project, catalog=catalog)

    while len(result.accepted) < amount:
        result.attempts += 1
        combination = sample_combination(catalog, rng)

        if is_rejected(blacklist, combination.trait_names):
            result.blacklisted += 1
        else:
            fp = fingerprint(combination.resolved)
            if uniques.insert_if_absent(fp):
                result.accepted.append((combination.indices, fp))
                if on_progress:
                    on_progress(project.slug, len(result.accepted), amount)
                continue
            result.duplicates += 1

        if result.rejections > tolerance:
            uniques.release(result.fingerprints)
            raise ToleranceExceeded(
                project=project.name,
                amount=amount,
                tolerance=tolerance,
                attempts=result.attempts,
                accepted=len(result.accepted),
            )

    logger.info(
        "Project %r: %d unique in %d attempt(s) (%d duplicate, %d blacklisted)",
        project.name,
        len(result.accepted),
        result.attempts,
        result.duplicates,
        result.blacklisted,
    )
    return result


def generate_projects(
    projects: list[ProjectConfig],
    blacklist: BlacklistTable | None = None,
    seed: int | None = None,
    max_workers: int | None = None,
    on_progress: ProjectProgressCallback | None = None,
    extension: str = "png",
    default_weight: int = DEFAULT_WEIGHT,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> GenerationRun:
    """Generate every project concurrently against one shared uniqueness set.

    Catalogs are loaded up front; a project whose catalog fails to load is
    recorded as failed and never sampled. Failed projects don't stop their
    siblings; inspect `GenerationRun.failures` or call `raise_for_failures()`.

    Raises:
        LockAcquisitionFailure: Unrecoverable; aborts the whole run
    """
    if seed is None:
        seed = random.randint(0, 2**31 - 1)
    master = random.Random(seed)
    run = GenerationRun(seed=seed)
    uniques = UniquenessSet(lock_timeout=lock_timeout)

    loaded: list[tuple[ProjectConfig, TraitCatalog, int]] = []
    for project in projects:
        project_seed = master.randint(0, 2**31 - 1)
        try:
            catalog = load_catalog(
                project.layers,
                project.path,
                off_traits=project.off_traits,
                extension=extension,
                default_weight=default_weight,
            )
        except CatalogError as e:
            logger.error("Project %r: unable to load layers: %s", project.name, e)
            run.failures[project.slug] = e
            continue

        space = catalog.combination_space()
        if project.amount > space:
            logger.warning(
                "Project %r asks for %d but its catalog yields at most %d unique "
                "combination(s)",
                project.name,
                project.amount,
                space,
            )
        loaded.append((project, catalog, project_seed))

    if not loaded:
        return run

    workers = ResourceGovernor(max_workers=max_workers).recommend_workers(len(loaded))
    with ThreadPoolExecutor(max_workers=workers) as ex:
        futures = {
            ex.submit(
                generate_project,
                project,
                catalog,
                uniques,
                blacklist,
                random.Random(project_seed),
                on_progress,
            ): (project, project_seed)
            for project, catalog, project_seed in loaded
        }
        for fut in as_completed(futures):
            project, project_seed = futures[fut]
            try:
                result = fut.result()
            except ToleranceExceeded as e:
                logger.error("%s", e)
                run.failures[project.slug] = e
                continue
            result.seed = project_seed
            run.results[project.slug] = result

    return run
