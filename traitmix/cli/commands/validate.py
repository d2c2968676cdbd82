"""Validate command: check project documents, catalogs and the blacklist."""

from pathlib import Path

import typer

from ...config import get_config
from ...core.errors import AmbiguousBlacklistEntry, CatalogError, ConfigParseError
from ..app import app, console, get_json_mode
from ..utils import Output, ExitCode


@app.command("validate")
def validate_command(
    configs: Path | None = typer.Option(
        None, "--configs", "-c", help="Folder of project documents"
    ),
    blacklist: Path | None = typer.Option(
        None, "--blacklist", "-b", help="Blacklist document"
    ),
    case_sensitive: bool | None = typer.Option(
        None,
        "--case-sensitive/--case-insensitive",
        help="Match blacklist trait names case-sensitively",
    ),
):
    """
    Validate every project without generating anything.

    Parses the project documents and the blacklist, builds each project's
    trait catalog, and reports how many unique combinations it can yield.

    EXIT CODES:
        0 = All projects valid
        1 = Invalid project, catalog or blacklist
        3 = Configs folder not found
    """
    from ...core.models import load_projects
    from ...generation import load_blacklist, load_catalog

    cfg = get_config()
    configs = configs or Path(cfg.paths.configs_dir)
    blacklist = blacklist or Path(cfg.paths.blacklist_file)
    if case_sensitive is None:
        case_sensitive = cfg.generation.blacklist_case_sensitive

    out = Output(console=console, json_mode=get_json_mode())

    try:
        projects = load_projects(configs)
    except (FileNotFoundError, ConfigParseError) as e:
        out.fail(e)
        raise typer.Exit(out.finish())

    try:
        table = load_blacklist(blacklist, case_sensitive=case_sensitive)
    except (ConfigParseError, AmbiguousBlacklistEntry) as e:
        out.fail(e)
        raise typer.Exit(out.finish())

    if table is not None:
        out.success(f"Blacklist valid ({len(table)} exclude(s))")

    rows = []
    for project in projects:
        try:
            catalog = load_catalog(
                project.layers,
                project.path,
                off_traits=project.off_traits,
                extension=cfg.generation.image_extension,
                default_weight=cfg.generation.default_weight,
            )
        except CatalogError as e:
            out.fail(e, project=project.slug)
            rows.append([project.slug, "-", "-", "-", str(project.amount), "invalid"])
            continue

        space = catalog.combination_space()
        status = "ok"
        if project.amount > space:
            status = "too small"
            out.warning(
                f"{project.slug}: asks for {project.amount} but the catalog yields "
                f"at most {space} unique combination(s)",
                project=project.slug,
                suggestion="Add traits or layers, or lower the amount",
            )
        skipped = len(project.layers) - len(catalog.layers)
        if skipped:
            out.warning(
                f"{project.slug}: {skipped} layer folder(s) missing "
                f"under {project.path}",
                project=project.slug,
            )
        rows.append(
            [
                project.slug,
                str(len(catalog.layers)),
                str(catalog.trait_count()),
                str(space),
                str(project.amount),
                status,
            ]
        )

    out.table(
        "Projects",
        ["Project", "Layers", "Traits", "Combinations", "Amount", "Status"],
        rows,
    )
    if out.exit_code == ExitCode.SUCCESS:
        out.success(f"{len(projects)} project(s) valid")
    raise typer.Exit(out.finish())
