"""Trait catalog construction.

A catalog is built once per project from its layer folders and is read-only
afterwards; sampler and compositor threads share it without locking.

Folder layout:
    <root>/<layer name>/<trait name>[#weight].<ext>
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from ..core.errors import (
    DuplicateTraitName,
    LayerUnreadable,
    UnnamedTrait,
    UnparsableWeight,
    ZeroWeightLayer,
)
from ..core.models import LayerConfig

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 50
WEIGHT_DELIMITER = "#"


@dataclass(frozen=True)
class Trait:
    """One selectable option of a layer.

    `visual` is the image file; None marks the layer's no-trait entry, which
    renders nothing and is never identified by its name.
    """

    layer: str
    name: str
    weight: int
    visual: Path | None = None

    @property
    def is_visual(self) -> bool:
        return self.visual is not None


@dataclass
class Layer:
    """A loaded layer: its config plus its traits in index order."""

    config: LayerConfig
    traits: list[Trait] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def label(self) -> str:
        return self.config.label

    @property
    def none_index(self) -> int | None:
        """Index of the no-trait entry (always last), if the layer has one."""
        if self.traits and not self.traits[-1].is_visual:
            return len(self.traits) - 1
        return None

    @property
    def total_weight(self) -> int:
        return sum(t.weight for t in self.traits)

    def matches(self, layer_ref: str) -> bool:
        """Whether an exclusion rule's layer reference points at this layer."""
        return layer_ref in (self.config.name, self.config.display_name)


@dataclass
class TraitCatalog:
    layers: list[Layer] = field(default_factory=list)
    width: int = 0
    height: int = 0

    def __len__(self) -> int:
        return len(self.layers)

    def trait(self, layer_index: int, trait_index: int) -> Trait:
        return self.layers[layer_index].traits[trait_index]

    def trait_count(self) -> int:
        """Number of visual traits across all layers."""
        return sum(1 for layer in self.layers for t in layer.traits if t.is_visual)

    def combination_space(self) -> int:
        """Upper bound on distinct fingerprints this catalog can produce.

        Each layer contributes its drawable visual traits, plus one "nothing"
        outcome when it has a no-trait entry. Weight-0 visual traits are never
        drawn and only the no-trait entry can be forced, so they don't count.
        """
        sizes = []
        for layer in self.layers:
            size = sum(1 for t in layer.traits if t.is_visual and t.weight > 0)
            if layer.none_index is not None:
                size += 1
            sizes.append(size)
        return math.prod(sizes) if sizes else 0


def parse_trait_stem(stem: str, path: Path, default_weight: int) -> tuple[str, int]:
    """Split a file stem into (name, weight).

    "Gold#20" -> ("Gold", 20); "Gold" -> ("Gold", default_weight)

    Raises:
        UnparsableWeight: If the suffix after '#' is not a non-negative integer.
        UnnamedTrait: If nothing precedes the '#'.
    """
    if WEIGHT_DELIMITER not in stem:
        return stem, default_weight

    name, _, raw_weight = stem.partition(WEIGHT_DELIMITER)
    if not name:
        raise UnnamedTrait(path)
    if not (raw_weight.isascii() and raw_weight.isdigit()):
        raise UnparsableWeight(path, raw_weight)
    return name, int(raw_weight)


def _list_trait_files(layer_path: Path, extension: str) -> list[Path]:
    suffix = "." + extension.lower().lstrip(".")
    try:
        entries = sorted(layer_path.iterdir())
    except OSError as e:
        raise LayerUnreadable(layer_path, e.strerror or str(e)) from e
    return [p for p in entries if p.is_file() and p.suffix.lower() == suffix]


def load_catalog(
    layer_configs: list[LayerConfig],
    root_path: Path | str,
    off_traits: set[str] | None = None,
    extension: str = "png",
    default_weight: int = DEFAULT_WEIGHT,
) -> TraitCatalog:
    """Build the trait catalog for one project.

    Layers whose folder doesn't exist are skipped (with a warning) and are
    absent from the catalog, so catalog layer i always pairs with its own
    config.

    Args:
        layer_configs: Layers in compositing order
        root_path: Project root holding one folder per layer
        off_traits: Trait names to leave out of the catalog
        extension: Image file extension to pick up
        default_weight: Weight for files without a `#weight` suffix

    Returns:
        TraitCatalog with width/height taken from the first image loaded

    Raises:
        LayerUnreadable: A layer path can't be listed as a folder, or one of
            its trait files isn't a readable image
        UnparsableWeight: A `#weight` suffix isn't a non-negative integer
        UnnamedTrait: A file is named only `#weight`
        DuplicateTraitName: A trait name appears twice anywhere in the catalog
        ZeroWeightLayer: A loaded layer can never be drawn
    """
    root = Path(root_path)
    off = off_traits or set()
    catalog = TraitCatalog()
    seen: dict[str, str] = {}

    for layer_config in layer_configs:
        layer_path = root / layer_config.name
        if not layer_path.exists():
            logger.warning(
                "Layer folder %s not found, skipping layer %r",
                layer_path,
                layer_config.name,
            )
            continue
        if not layer_path.is_dir():
            raise LayerUnreadable(layer_path, "not a folder")

        layer = Layer(config=layer_config)

        for trait_path in _list_trait_files(layer_path, extension):
            stem = trait_path.stem
            name, weight = parse_trait_stem(stem, trait_path, default_weight)

            if name in off or stem in off:
                logger.debug("Skipping disabled trait %r", name)
                continue

            if name in seen:
                raise DuplicateTraitName(name, layer_config.name, seen[name])
            seen[name] = layer_config.name

            # Header read for every file; the first one sets the canvas size
            try:
                with Image.open(trait_path) as img:
                    size = img.size
            except OSError as e:
                raise LayerUnreadable(trait_path, str(e)) from e
            if catalog.width == 0 and catalog.height == 0:
                catalog.width, catalog.height = size

            layer.traits.append(
                Trait(
                    layer=layer_config.name,
                    name=name,
                    weight=weight,
                    visual=trait_path,
                )
            )

        if layer_config.needs_none:
            # Without a declared none-weight the entry is only reachable
            # through an exclusion override.
            layer.traits.append(
                Trait(
                    layer=layer_config.name,
                    name="None",
                    weight=layer_config.none or 0,
                    visual=None,
                )
            )

        if layer.total_weight == 0:
            raise ZeroWeightLayer(layer_config.name)

        logger.debug(
            "Loaded layer %r with %d trait(s)", layer_config.name, len(layer.traits)
        )
        catalog.layers.append(layer)

    logger.info(
        "Catalog %s: %d layer(s), %d trait(s), %dx%d",
        root,
        len(catalog.layers),
        catalog.trait_count(),
        catalog.width,
        catalog.height,
    )
    return catalog
