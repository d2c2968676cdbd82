"""Weighted trait sampling with exclusion resolution.

The sampler is a catalog interpreter: it draws one trait index per layer,
then applies each layer's exclusion rules in a single pass.

Exclusion rules are evaluated against the drawn selections, before any
override is applied, so one layer's override never triggers or suppresses
another layer's rule within the same draw. There is no fixed-point
iteration.
"""

import math
import random
from dataclasses import dataclass

from ..core.models import ExclusionRule
from .catalog import TraitCatalog, Trait


@dataclass(frozen=True)
class SampledCombination:
    """One sampling attempt.

    Attributes:
        indices: Trait index per catalog layer (length == layer count)
        resolved: (layer name, trait name) pairs for layers resolving to a
            visual trait
    """

    indices: tuple[int, ...]
    resolved: frozenset[tuple[str, str]]

    @property
    def trait_names(self) -> set[str]:
        return {name for _, name in self.resolved}


def weighted_draw(traits: list[Trait], rng: random.Random) -> int:
    """Draw a trait index proportionally to trait weights.

    n = floor(r * total) for r in [0, 1); walk the traits subtracting each
    weight, the first index where n goes negative wins. Weight-0 traits can
    never be selected by a draw.

    Raises:
        ValueError: If the traits' total weight is 0.
    """
    total = sum(t.weight for t in traits)
    if total <= 0:
        raise ValueError("cannot draw from a layer with total weight 0")

    n = math.floor(rng.random() * total)
    for index, t in enumerate(traits):
        n -= t.weight
        if n < 0:
            return index

    # Unreachable for integer weights; guards float rounding at r -> 1.0
    return max(i for i, t in enumerate(traits) if t.weight > 0)


def rule_matches(
    rule: ExclusionRule,
    catalog: TraitCatalog,
    drawn: tuple[int, ...] | list[int],
    owner_index: int,
) -> bool:
    """Check one exclusion rule against the other layers' drawn traits."""
    for layer_index, trait_index in enumerate(drawn):
        if layer_index == owner_index:
            continue

        layer = catalog.layers[layer_index]
        t = layer.traits[trait_index]

        # Layer-only rule: any visual trait on that layer
        if not rule.traits:
            if layer.matches(rule.layer) and t.is_visual:
                return True
            continue

        # Trait-only rule: the trait anywhere
        if not rule.layer:
            if t.is_visual and t.name in rule.traits:
                return True
            continue

        if layer.matches(rule.layer) and t.is_visual and t.name in rule.traits:
            return True

    return False


def resolve_exclusions(
    catalog: TraitCatalog, drawn: tuple[int, ...] | list[int]
) -> tuple[int, ...]:
    """Apply every layer's exclusion rules in one pass, in layer order.

    A layer whose rules match is moved to its no-trait entry.
    """
    resolved = list(drawn)
    for layer_index, layer in enumerate(catalog.layers):
        rules = layer.config.exclusion_rules
        if not rules or layer.none_index is None:
            continue
        if any(rule_matches(r, catalog, drawn, layer_index) for r in rules):
            resolved[layer_index] = layer.none_index
    return tuple(resolved)


def resolved_pairs(
    catalog: TraitCatalog, indices: tuple[int, ...]
) -> frozenset[tuple[str, str]]:
    """(layer name, trait name) for each layer resolving to a visual trait."""
    pairs = set()
    for layer, trait_index in zip(catalog.layers, indices):
        t = layer.traits[trait_index]
        if t.is_visual:
            pairs.add((layer.name, t.name))
    return frozenset(pairs)


def sample_combination(
    catalog: TraitCatalog, rng: random.Random | None = None
) -> SampledCombination:
    """Draw one combination from the catalog.

    Args:
        catalog: Loaded trait catalog
        rng: Random source; pass a seeded random.Random for reproducibility

    Returns:
        SampledCombination with final indices and resolved visual pairs
    """
    rng = rng or random.Random()
    drawn = tuple(weighted_draw(layer.traits, rng) for layer in catalog.layers)
    indices = resolve_exclusions(catalog, drawn)
    return SampledCombination(
        indices=indices, resolved=resolved_pairs(catalog, indices)
    )
