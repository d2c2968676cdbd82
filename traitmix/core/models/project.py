"""Project and blacklist document models for traitmix.

A ProjectConfig describes one generation job: where its layer folders live,
how many unique combinations to produce, how many rejected attempts to
tolerate, and how each layer behaves (none-weight, exclusion rules).

Documents are JSON or YAML. Every field beyond the core five is optional, so
older and newer document shapes validate against the same model.
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import ConfigParseError


PROJECT_SUFFIXES = (".json", ".yaml", ".yml")


# =============================================================================
# Layers
# =============================================================================


class ExclusionRule(BaseModel):
    """Force the owning layer to its no-trait entry when another layer matches.

    - traits empty: matches when `layer` resolves to any visual trait
    - layer empty: matches when any other layer resolves to one of `traits`
    - both set: matches when `layer` resolves to one of `traits`
    """

    layer: str = ""
    traits: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _require_layer_or_traits(self) -> "ExclusionRule":
        if not self.layer and not self.traits:
            raise ValueError("exclusion rule needs a layer, traits, or both")
        return self


class LayerConfig(BaseModel):
    """One layer of a project, in compositing order."""

    name: str = Field(description="Layer folder name under the project path")
    display_name: str | None = Field(
        default=None, description="Label used in attribute documents"
    )
    none: int | None = Field(
        default=None,
        ge=0,
        description="Weight of the no-trait option (None = no declared weight)",
    )
    exclude_if_traits: list[ExclusionRule] | None = None

    @property
    def label(self) -> str:
        return self.display_name or self.name

    @property
    def exclusion_rules(self) -> list[ExclusionRule]:
        return self.exclude_if_traits or []

    @property
    def needs_none(self) -> bool:
        """Whether the layer gets a no-trait entry."""
        return self.none is not None or self.exclude_if_traits is not None


# =============================================================================
# Projects
# =============================================================================


class ProjectConfig(BaseModel):
    """A single generation project."""

    name: str
    amount: int = Field(ge=0, description="Number of unique combinations to generate")
    tolerance: int = Field(
        ge=0, description="Rejected attempts allowed before the project fails"
    )
    path: Path = Field(description="Root folder holding one sub-folder per layer")
    layers: list[LayerConfig]
    display_name: str | None = None
    policy_id: str | None = None
    off_traits: set[str] | None = None
    extra: dict[str, Any] | None = None
    # Set by load_project from the document's file stem; never serialized
    config_name: str = Field(default="", exclude=True)

    @property
    def slug(self) -> str:
        """Output folder name: the source document's stem, else `name`."""
        return self.config_name or self.name


def _read_document(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def load_project(path: Path | str) -> ProjectConfig:
    """Load a project document (JSON or YAML).

    A relative `path` inside the document is resolved against the folder
    holding the document.

    Raises:
        ConfigParseError: If the file can't be read or doesn't validate.
    """
    path = Path(path)
    try:
        data = _read_document(path)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(path, str(e)) from e

    if not isinstance(data, dict):
        raise ConfigParseError(path, "expected a mapping at the top level")

    try:
        project = ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigParseError(path, str(e)) from e

    if not project.path.is_absolute():
        project.path = path.parent / project.path
    project.config_name = path.stem.split(".")[0]
    return project


def load_projects(folder: Path | str) -> list[ProjectConfig]:
    """Load every project document in a folder, sorted by file name.

    Raises:
        FileNotFoundError: If the folder doesn't exist.
        ConfigParseError: If any document is invalid, or two documents share
            a file stem (they would share an output folder).
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise FileNotFoundError(f"Config folder not found: {folder}")

    projects: list[ProjectConfig] = []
    seen: set[str] = set()
    for p in sorted(folder.iterdir()):
        if not p.is_file() or p.suffix.lower() not in PROJECT_SUFFIXES:
            continue
        project = load_project(p)
        if project.slug in seen:
            raise ConfigParseError(p, f"duplicate project name {project.slug!r}")
        seen.add(project.slug)
        projects.append(project)
    return projects


# =============================================================================
# Blacklist
# =============================================================================


class BlacklistRule(BaseModel):
    """`trait_name` may never appear together with any of `excludes`."""

    trait_name: str
    excludes: list[str] = Field(default_factory=list)


class BlacklistDocument(BaseModel):
    """Process-wide blacklist; serialized under the `list` key."""

    model_config = ConfigDict(populate_by_name=True)

    rules: list[BlacklistRule] = Field(default_factory=list, alias="list")

    @classmethod
    def from_file(cls, path: Path | str) -> "BlacklistDocument":
        """Load a blacklist document; a bare list of rules is also accepted.

        Raises:
            ConfigParseError: If the file can't be read or doesn't validate.
        """
        path = Path(path)
        try:
            data = _read_document(path)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigParseError(path, str(e)) from e

        if isinstance(data, list):
            data = {"list": data}
        if data is None:
            data = {}

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigParseError(path, str(e)) from e
