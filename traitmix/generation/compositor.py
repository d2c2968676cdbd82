"""Render accepted combinations and write their attribute documents.

Output layout:
    <output>/<project>/<fingerprint>.png
    <output>/<project>/<fingerprint>.json   layer label -> trait name (null = none)
    <output>/<project>/rarity.json          per-layer trait counts
    <output>/<project>/manifest.json        run summary + passthrough metadata
"""

import json
import logging
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from PIL import Image

from ..utils.callbacks import ProjectProgressCallback
from ..utils.resource_governor import ResourceGovernor
from .catalog import TraitCatalog
from .coordinator import ProjectResult

logger = logging.getLogger(__name__)


def clean_output(output_dir: Path | str) -> None:
    """Remove the output tree if it exists."""
    output_dir = Path(output_dir)
    if output_dir.exists():
        logger.info("Removing %s", output_dir)
        shutil.rmtree(output_dir)


def load_visuals(catalog: TraitCatalog) -> dict[Path, Image.Image]:
    """Decode every visual trait once, as RGBA."""
    images: dict[Path, Image.Image] = {}
    for layer in catalog.layers:
        for t in layer.traits:
            if t.visual is not None and t.visual not in images:
                with Image.open(t.visual) as img:
                    images[t.visual] = img.convert("RGBA")
    return images


def render_combination(
    catalog: TraitCatalog,
    indices: tuple[int, ...],
    images: dict[Path, Image.Image],
) -> Image.Image:
    """Alpha-composite the combination's visual traits in layer order."""
    size = (catalog.width, catalog.height)
    base = Image.new("RGBA", size, (0, 0, 0, 0))
    for layer, trait_index in zip(catalog.layers, indices):
        t = layer.traits[trait_index]
        if t.visual is None:
            continue
        overlay = images[t.visual]
        if overlay.size != size:
            # crop() pads with transparent pixels when the overlay is smaller
            overlay = overlay.crop((0, 0, *size))
        base = Image.alpha_composite(base, overlay)
    return base


def attributes_for(
    catalog: TraitCatalog, indices: tuple[int, ...]
) -> dict[str, Any]:
    """Layer label -> trait name, None for a no-trait selection."""
    attrs: dict[str, Any] = {}
    for layer, trait_index in zip(catalog.layers, indices):
        t = layer.traits[trait_index]
        attrs[layer.label] = t.name if t.is_visual else None
    return attrs


def rarity_for(result: ProjectResult) -> dict[str, dict[str, dict[str, float]]]:
    total = len(result.accepted) or 1
    return {
        label: {
            name: {"count": count, "percentage": count / total}
            for name, count in sorted(counts.items(), key=lambda x: -x[1])
        }
        for label, counts in result.trait_counts().items()
    }


def manifest_for(result: ProjectResult) -> dict[str, Any]:
    project = result.project
    data: dict[str, Any] = {
        "name": project.name,
        "amount": len(result.accepted),
        "attempts": result.attempts,
        "duplicates": result.duplicates,
        "blacklisted": result.blacklisted,
        "seed": result.seed,
        "fingerprints": result.fingerprints,
    }
    if project.display_name:
        data["display_name"] = project.display_name
    if project.policy_id:
        data["policy_id"] = project.policy_id
    if project.extra:
        data["extra"] = project.extra
    return data


def _write_json(path: Path, payload: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def write_project(
    result: ProjectResult,
    output_dir: Path | str,
    max_workers: int | None = None,
    on_progress: ProjectProgressCallback | None = None,
) -> Path:
    """Render and write every accepted combination of a project.

    Each combination writes to its own fingerprint-named files, so workers
    never share an output path.

    Returns:
        The project's output folder
    """
    catalog = result.catalog
    project_dir = Path(output_dir) / result.project.slug
    project_dir.mkdir(parents=True, exist_ok=True)

    images = load_visuals(catalog)
    total = len(result.accepted)
    done = 0

    def _write_one(indices: tuple[int, ...], fp: str) -> None:
        image = render_combination(catalog, indices, images)
        image.save(project_dir / f"{fp}.png")
        _write_json(project_dir / f"{fp}.json", attributes_for(catalog, indices))

    workers = ResourceGovernor(max_workers=max_workers).recommend_workers(total)
    with ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [
            ex.submit(_write_one, indices, fp) for indices, fp in result.accepted
        ]
        for fut in futures:
            fut.result()
            done += 1
            if on_progress:
                on_progress(result.project.slug, done, total)

    _write_json(project_dir / "rarity.json", rarity_for(result))
    _write_json(project_dir / "manifest.json", manifest_for(result))
    logger.info(
        "Project %r: wrote %d image(s) to %s", result.project.name, total, project_dir
    )
    return project_dir
