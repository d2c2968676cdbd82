"""Gen command: generate and render unique combinations for every project."""

import time
from pathlib import Path
from typing import Callable

import typer

from ...config import get_config
from ...core.errors import (
    AmbiguousBlacklistEntry,
    ConfigParseError,
    LockAcquisitionFailure,
    ToleranceExceeded,
)
from ..app import app, console, get_json_mode, setup_logging
from ..utils import Output, ExitCode, format_elapsed


@app.command("gen")
def gen_command(
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
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output folder (cleaned first)"
    ),
    seed: int | None = typer.Option(
        None, "--seed", help="Random seed for reproducibility"
    ),
    workers: int | None = typer.Option(
        None, "--workers", "-w", help="Max worker threads (0 = auto)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show info logs"),
    debug: bool = typer.Option(False, "--debug", help="Show debug logs"),
):
    """
    Generate unique trait combinations and render them.

    Every project document in the configs folder is generated concurrently.
    No combination is produced twice across the whole run.

    EXIT CODES:
        0 = Success
        1 = Invalid project, catalog or blacklist
        3 = Configs folder not found
        4 = Generation error (tolerance exceeded)

    Examples:
        traitmix gen
        traitmix gen -c configs -b blacklist.json --seed 42
        traitmix --json gen -o out
    """
    from ...core.models import load_projects
    from ...generation import (
        clean_output,
        generate_projects,
        load_blacklist,
        write_project,
    )

    setup_logging(verbose=verbose, debug=debug)
    cfg = get_config()
    configs = configs or Path(cfg.paths.configs_dir)
    blacklist = blacklist or Path(cfg.paths.blacklist_file)
    output = output or Path(cfg.paths.output_dir)
    if case_sensitive is None:
        case_sensitive = cfg.generation.blacklist_case_sensitive
    if workers is None:
        workers = cfg.generation.max_workers

    json_mode = get_json_mode()
    out = Output(console=console, json_mode=json_mode)
    start_time = time.time()

    out.header("Init Configs")

    try:
        projects = load_projects(configs)
    except (FileNotFoundError, ConfigParseError) as e:
        out.fail(e)
        raise typer.Exit(out.finish())

    if not projects:
        out.error(
            f"No project documents found in {configs}",
            exit_code=ExitCode.FILE_NOT_FOUND,
            suggestion="Add a .json or .yaml project document",
        )
        raise typer.Exit(out.finish())

    out.success(
        f"Loaded {len(projects)} project(s) from {configs}",
        project_names=[p.slug for p in projects],
    )

    try:
        table = load_blacklist(blacklist, case_sensitive=case_sensitive)
    except (ConfigParseError, AmbiguousBlacklistEntry) as e:
        out.fail(e)
        raise typer.Exit(out.finish())

    if table is not None:
        out.success(
            f"Blacklist: {len(table)} exclude(s), case sensitive: {case_sensitive}",
            blacklist_entries=len(table),
        )
    else:
        out.text("[dim]No blacklist config found[/dim]")

    clean_output(output)
    output.mkdir(parents=True)

    # Sampling
    try:
        run = _run_with_progress(
            "Sampling",
            json_mode,
            {p.slug: p.amount for p in projects},
            lambda on_progress: generate_projects(
                projects,
                blacklist=table,
                seed=seed,
                max_workers=workers,
                on_progress=on_progress,
                extension=cfg.generation.image_extension,
                default_weight=cfg.generation.default_weight,
                lock_timeout=cfg.generation.lock_timeout,
            ),
        )
    except LockAcquisitionFailure as e:
        out.fail(e)
        raise typer.Exit(out.finish())

    out.set_data("seed", run.seed)

    # Rendering
    out.header("Generating")
    results = list(run.results.values())
    _run_with_progress(
        "Rendering",
        json_mode,
        {r.project.slug: len(r.accepted) for r in results},
        lambda on_progress: [
            write_project(r, output, max_workers=workers, on_progress=on_progress)
            for r in results
        ],
    )

    rows = []
    for project in projects:
        result = run.results.get(project.slug)
        if result is None:
            rows.append(
                [project.slug, str(project.amount), "0", "-", "-", "-", "failed"]
            )
            continue
        rows.append(
            [
                project.slug,
                str(project.amount),
                str(len(result.accepted)),
                str(result.attempts),
                str(result.duplicates),
                str(result.blacklisted),
                "ok",
            ]
        )
    out.blank()
    out.table(
        "Projects",
        [
            "Project",
            "Requested",
            "Generated",
            "Attempts",
            "Duplicates",
            "Blacklisted",
            "Status",
        ],
        rows,
    )

    for slug, err in sorted(run.failures.items()):
        suggestion = None
        if isinstance(err, ToleranceExceeded):
            suggestion = "Add more traits or raise the project's tolerance"
        out.fail(err, project=slug, suggestion=suggestion)

    elapsed = time.time() - start_time
    out.set_data("elapsed_seconds", round(elapsed, 2))
    if run.ok:
        out.blank()
        out.success(
            f"Finished in {format_elapsed(elapsed)} → {output}", output=str(output)
        )

    raise typer.Exit(out.finish())


def _run_with_progress(
    label: str, json_mode: bool, totals: dict[str, int], work: Callable
):
    """Run `work(on_progress)` behind one rich progress bar per project."""
    if json_mode:
        return work(None)

    from rich.progress import (
        Progress,
        SpinnerColumn,
        TextColumn,
        BarColumn,
        MofNCompleteColumn,
        TimeElapsedColumn,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[cyan]{task.description}[/cyan]"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        tasks = {
            slug: progress.add_task(f"{slug} -> {label}", total=total)
            for slug, total in totals.items()
        }

        def on_progress(project: str, current: int, total: int) -> None:
            if project in tasks:
                progress.update(tasks[project], completed=current)

        return work(on_progress)
