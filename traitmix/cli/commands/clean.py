"""Clean command: remove the output folder."""

from pathlib import Path

import typer

from ...config import get_config
from ..app import app, console, get_json_mode
from ..utils import Output


@app.command("clean")
def clean_command(
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output folder to remove"
    ),
):
    """Remove the output folder and everything generated into it."""
    from ...generation import clean_output

    output = output or Path(get_config().paths.output_dir)
    out = Output(console=console, json_mode=get_json_mode())

    if not output.exists():
        out.success(f"Nothing to clean at {output}", removed=False)
        raise typer.Exit(out.finish())

    clean_output(output)
    out.success(f"Removed {output}", removed=True, output=str(output))
    raise typer.Exit(out.finish())
