"""Config command: show, set and reset ~/.config/traitmix/config.json."""

from typing import Any, Callable

import typer

from ..app import app, console
from ...config import (
    get_config,
    reset_config,
    CONFIG_FILE,
    parse_bool,
)


_BOOL_WORDS = ("true", "false", "1", "0", "yes", "no", "on", "off")


def _parse_strict_bool(value: str) -> bool:
    if value.strip().lower() not in _BOOL_WORDS:
        raise ValueError(value)
    return parse_bool(value)


# key -> (parser, label used in error messages)
FIELDS: dict[str, tuple[Callable[[str], Any], str]] = {
    "paths.configs_dir": (str, "path"),
    "paths.output_dir": (str, "path"),
    "paths.blacklist_file": (str, "path"),
    "generation.blacklist_case_sensitive": (_parse_strict_bool, "boolean"),
    "generation.default_weight": (int, "integer"),
    "generation.image_extension": (str, "extension"),
    "generation.max_workers": (int, "integer"),
    "generation.lock_timeout": (float, "number"),
}


def _print_keys() -> None:
    console.print()
    console.print("Available keys:")
    for k in sorted(FIELDS):
        console.print(f"  {k}")


@app.command("config")
def config_command(
    action: str = typer.Argument(..., help="Action: show, set, reset"),
    key: str | None = typer.Argument(
        None, help="Config key (e.g. paths.output_dir, generation.max_workers)"
    ),
    value: str | None = typer.Argument(None, help="Value to set"),
):
    """View or modify traitmix configuration.

    Examples:
        traitmix config show
        traitmix config set paths.output_dir build/output
        traitmix config set generation.blacklist_case_sensitive true
        traitmix config reset
    """
    if action == "show":
        _show_config()
    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage:[/red] traitmix config set <key> <value>")
            _print_keys()
            raise typer.Exit(1)
        _set_config(key, value)
    elif action == "reset":
        _reset_config()
    else:
        console.print(f"[red]Unknown action:[/red] {action}")
        console.print("Valid actions: show, set, reset")
        raise typer.Exit(1)


def _show_config():
    """Print every resolved setting, grouped by section."""
    config = get_config()

    console.print()
    console.print("[bold]traitmix Configuration[/bold]")
    console.print("─" * 40)

    for section, values in config.to_dict().items():
        console.print()
        console.print(f"[bold cyan]{section.capitalize()}[/bold cyan]")
        width = max(len(name) for name in values)
        for name, current in values.items():
            if name == "max_workers" and not current:
                current = "[dim](auto)[/dim]"
            console.print(f"  {name.ljust(width)} = {current}")

    console.print()
    if CONFIG_FILE.exists():
        console.print(f"Config file: {CONFIG_FILE}")
    else:
        console.print(f"Config file: [dim]not created yet[/dim] ({CONFIG_FILE})")
    console.print()


def _set_config(key: str, value: str):
    if key not in FIELDS:
        console.print(f"[red]Unknown key:[/red] {key}")
        _print_keys()
        raise typer.Exit(1)

    parse, kind = FIELDS[key]
    try:
        parsed = parse(value)
    except ValueError:
        console.print(f"[red]Invalid {kind} value:[/red] {value}")
        raise typer.Exit(1)

    config = get_config()
    section, field_name = key.split(".", 1)
    setattr(getattr(config, section), field_name, parsed)
    config.save()
    reset_config()

    console.print(f"[green]✓[/green] Set {key} = {parsed}")
    console.print(f"  Saved to {CONFIG_FILE}")


def _reset_config():
    if not CONFIG_FILE.exists():
        console.print("Config already at defaults (no config file exists)")
        return

    CONFIG_FILE.unlink()
    reset_config()
    console.print("[green]✓[/green] Config reset to defaults")
    console.print(f"  Removed {CONFIG_FILE}")
