"""Error taxonomy for traitmix.

Structural errors (config documents, catalogs, blacklists) are raised before
any sampling starts. Generation errors are raised by the coordinator once a
catalog has loaded successfully.
"""

from pathlib import Path


class TraitmixError(Exception):
    """Base class for all traitmix errors."""

    pass


class ConfigParseError(TraitmixError):
    """Raised when a project or blacklist document cannot be read or validated."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Unable to parse config file {self.path}: {reason}")


# =============================================================================
# Catalog construction
# =============================================================================


class CatalogError(TraitmixError):
    """Raised when a trait catalog cannot be built."""

    pass


class DuplicateTraitName(CatalogError):
    def __init__(self, name: str, layer: str, first_layer: str):
        self.name = name
        self.layer = layer
        self.first_layer = first_layer
        super().__init__(
            f"Duplicated trait name of {name!r} in layer {layer!r} "
            f"(already defined in layer {first_layer!r})"
        )


class LayerUnreadable(CatalogError):
    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path} is not a readable folder: {reason}")


class UnparsableWeight(CatalogError):
    def __init__(self, path: Path | str, weight: str):
        self.path = Path(path)
        self.weight = weight
        super().__init__(
            f"{weight!r} is not a parsable weight (in {self.path.name}); "
            "expected a non-negative integer after '#'"
        )


class UnnamedTrait(CatalogError):
    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(
            f"{self.path.name} has no trait name before '#'; "
            "expected <name>#<weight>"
        )


class ZeroWeightLayer(CatalogError):
    def __init__(self, layer: str):
        self.layer = layer
        super().__init__(
            f"Layer {layer!r} has a total weight of 0 and can never be drawn"
        )


# =============================================================================
# Blacklist
# =============================================================================


class AmbiguousBlacklistEntry(TraitmixError):
    def __init__(self, partner: str, subject: str, existing_subject: str):
        self.partner = partner
        self.subject = subject
        self.existing_subject = existing_subject
        super().__init__(
            f"Blacklist already contains an exclude of {partner!r} "
            f"(for {existing_subject!r}); try merging it into the excludes "
            f"of trait_name {partner!r}"
        )


# =============================================================================
# Generation
# =============================================================================


class GenerationError(TraitmixError):
    """Raised when generation fails after catalogs have loaded."""

    pass


class ToleranceExceeded(GenerationError):
    def __init__(
        self,
        project: str,
        amount: int,
        tolerance: int,
        attempts: int,
        accepted: int,
    ):
        self.project = project
        self.amount = amount
        self.tolerance = tolerance
        self.attempts = attempts
        self.accepted = accepted
        super().__init__(
            f"Project {project!r}: {tolerance} rejected attempts exceeded after "
            f"{attempts} attempts ({accepted}/{amount} unique combinations). "
            f"Add more layers or traits, or raise the tolerance, to generate {amount}"
        )


class LockAcquisitionFailure(GenerationError):
    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Unable to acquire the uniqueness lock within {timeout}s")


class GenerationFailed(GenerationError):
    """Aggregated failure for one or more projects in a run."""

    def __init__(self, failures: dict[str, Exception]):
        self.failures = dict(failures)
        lines = [f"  {name}: {err}" for name, err in sorted(self.failures.items())]
        super().__init__(
            f"{len(self.failures)} project(s) failed:\n" + "\n".join(lines)
        )
