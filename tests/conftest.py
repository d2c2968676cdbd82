"""Shared fixtures: on-disk trait folders, in-memory catalogs, config isolation."""

import json
import logging
from pathlib import Path

import pytest
from PIL import Image

from traitmix import config as traitmix_config
from traitmix.cli.commands import config_cmd
from traitmix.core.models import LayerConfig
from traitmix.generation.catalog import Layer, Trait, TraitCatalog


def write_png(
    path: Path,
    color: tuple[int, int, int, int] = (255, 0, 0, 255),
    size: tuple[int, int] = (4, 4),
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, color).save(path)
    return path


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Never read or write the real ~/.config/traitmix."""
    config_dir = tmp_path_factory.mktemp("traitmix-config")
    monkeypatch.setattr(traitmix_config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(traitmix_config, "CONFIG_FILE", config_dir / "config.json")
    monkeypatch.setattr(config_cmd, "CONFIG_FILE", config_dir / "config.json")
    for var in (
        "TRAITMIX_CONFIGS_DIR",
        "TRAITMIX_OUTPUT_DIR",
        "TRAITMIX_BLACKLIST_FILE",
        "TRAITMIX_BLACKLIST_CASE_SENSITIVE",
        "TRAITMIX_MAX_WORKERS",
        "TRAITMIX_DEFAULT_WEIGHT",
    ):
        monkeypatch.delenv(var, raising=False)
    traitmix_config.reset_config()
    yield config_dir
    traitmix_config.reset_config()
    # `traitmix gen` raises the package logger level
    logging.getLogger("traitmix").setLevel(logging.NOTSET)


@pytest.fixture
def trait_tree(tmp_path):
    """Build `<root>/<layer>/<file>` PNG folders from {layer: [file names]}."""

    def _build(layers: dict[str, list[str]], root: Path | None = None) -> Path:
        root = root or tmp_path / "traits"
        root.mkdir(parents=True, exist_ok=True)
        for i, (layer, files) in enumerate(layers.items()):
            (root / layer).mkdir(parents=True, exist_ok=True)
            for j, file_name in enumerate(files):
                color = ((60 * i) % 256, (60 * j) % 256, 120, 255)
                write_png(root / layer / file_name, color=color)
        return root

    return _build


@pytest.fixture
def make_catalog():
    """Build an in-memory catalog; visuals point at paths that are never read.

    Takes [(LayerConfig, [(trait name, weight), ...]), ...]. A no-trait entry
    is appended the same way load_catalog does.
    """

    def _build(
        layers: list[tuple[LayerConfig, list[tuple[str, int]]]],
    ) -> TraitCatalog:
        catalog = TraitCatalog(width=4, height=4)
        for config, traits in layers:
            layer = Layer(config=config)
            for name, weight in traits:
                layer.traits.append(
                    Trait(
                        layer=config.name,
                        name=name,
                        weight=weight,
                        visual=Path(f"{config.name}/{name}.png"),
                    )
                )
            if config.needs_none:
                layer.traits.append(
                    Trait(
                        layer=config.name,
                        name="None",
                        weight=config.none or 0,
                        visual=None,
                    )
                )
            catalog.layers.append(layer)
        return catalog

    return _build


@pytest.fixture
def project_doc(tmp_path):
    """Write a project document into `<tmp>/configs` and return its path."""

    def _write(name: str, data: dict, folder: Path | None = None) -> Path:
        folder = folder or tmp_path / "configs"
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / f"{name}.json"
        path.write_text(json.dumps(data, default=str))
        return path

    return _write


@pytest.fixture
def png():
    """The write_png helper, for tests that lay out images by hand."""
    return write_png
