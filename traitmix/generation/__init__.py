"""Combination engine: catalog, sampler, fingerprint, blacklist, coordinator."""

from .catalog import Trait, Layer, TraitCatalog, load_catalog, parse_trait_stem
from .sampler import (
    SampledCombination,
    weighted_draw,
    rule_matches,
    resolve_exclusions,
    sample_combination,
)
from .fingerprint import fingerprint, trait_label
from .blacklist import BlacklistTable, build_blacklist, is_rejected, load_blacklist
from .coordinator import (
    UniquenessSet,
    ProjectResult,
    GenerationRun,
    generate_project,
    generate_projects,
)
from .compositor import (
    clean_output,
    render_combination,
    attributes_for,
    write_project,
)

__all__ = [
    # Catalog
    "Trait",
    "Layer",
    "TraitCatalog",
    "load_catalog",
    "parse_trait_stem",
    # Sampler
    "SampledCombination",
    "weighted_draw",
    "rule_matches",
    "resolve_exclusions",
    "sample_combination",
    # Fingerprint
    "fingerprint",
    "trait_label",
    # Blacklist
    "BlacklistTable",
    "build_blacklist",
    "is_rejected",
    "load_blacklist",
    # Coordinator
    "UniquenessSet",
    "ProjectResult",
    "GenerationRun",
    "generate_project",
    "generate_projects",
    # Compositor
    "clean_output",
    "render_combination",
    "attributes_for",
    "write_project",
]
