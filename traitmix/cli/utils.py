"""Dual-mode CLI output: rich text for people, one JSON document for scripts.

Commands build an `Output`, report through it, and exit with `out.finish()`:

    out = Output(console=console, json_mode=get_json_mode())
    out.success("Loaded 2 project(s)", project_names=["punks", "apes"])
    out.fail(err, project="punks")
    raise typer.Exit(out.finish())

In --json mode nothing is printed until `finish()`, which writes the
collected document (status, warnings, errors, tables, extra keys) to stdout.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, PrivateAttr, ConfigDict
from rich.console import Console
from rich.table import Table

from ..core.errors import (
    AmbiguousBlacklistEntry,
    CatalogError,
    ConfigParseError,
    GenerationError,
)


class ExitCode:
    """Process exit codes shared by every command.

        0 = Success
        1 = Invalid project document, catalog or blacklist
        3 = Configs folder or project documents not found
        4 = Generation failed (tolerance exceeded, uniqueness lock timeout)
    """

    SUCCESS = 0
    VALIDATION_ERROR = 1
    FILE_NOT_FOUND = 3
    GENERATION_ERROR = 4


def exit_code_for(err: BaseException) -> int:
    """Map a traitmix failure to the exit code the CLI reports for it."""
    if isinstance(err, FileNotFoundError):
        return ExitCode.FILE_NOT_FOUND
    if isinstance(err, (ConfigParseError, CatalogError, AmbiguousBlacklistEntry)):
        return ExitCode.VALIDATION_ERROR
    if isinstance(err, GenerationError):
        return ExitCode.GENERATION_ERROR
    return ExitCode.VALIDATION_ERROR


class Output(BaseModel):
    """Collects a command's results for either rich or JSON rendering."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    console: Console
    json_mode: bool = False

    _data: dict[str, Any] = PrivateAttr()
    _exit_code: int = PrivateAttr(default=ExitCode.SUCCESS)

    def model_post_init(self, __context: Any) -> None:
        self._data = {"status": "success", "warnings": [], "errors": []}

    def _notice(
        self,
        bucket: str,
        icon: str,
        message: str,
        project: str | None,
        suggestion: str | None,
    ) -> None:
        if self.json_mode:
            entry: dict[str, Any] = {"message": message}
            if project:
                entry["project"] = project
            if suggestion:
                entry["suggestion"] = suggestion
            self._data[bucket].append(entry)
            return

        self.console.print(f"{icon} {message}")
        if suggestion:
            self.console.print(f"  [dim]→ {suggestion}[/dim]")

    def success(self, message: str, **data: Any) -> None:
        """Print a success line; in JSON mode merge `data` into the document."""
        if self.json_mode:
            self._data.update(data)
        else:
            self.console.print(f"[green]✓[/green] {message}")

    def warning(
        self,
        message: str,
        *,
        project: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        self._notice("warnings", "[yellow]⚠[/yellow]", message, project, suggestion)

    def error(
        self,
        message: str,
        *,
        project: str | None = None,
        suggestion: str | None = None,
        exit_code: int = ExitCode.VALIDATION_ERROR,
    ) -> None:
        """Report an error; the last one reported decides the exit code."""
        self._exit_code = exit_code
        self._data["status"] = "error"
        self._notice("errors", "[red]✗[/red]", message, project, suggestion)

    def fail(
        self,
        err: BaseException,
        *,
        project: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Report an exception with the exit code its type maps to."""
        message = f"{project}: {err}" if project else str(err)
        self.error(
            message,
            project=project,
            suggestion=suggestion,
            exit_code=exit_code_for(err),
        )

    def text(self, message: str) -> None:
        if not self.json_mode:
            self.console.print(message)

    def blank(self) -> None:
        if not self.json_mode:
            self.console.print()

    def header(self, title: str) -> None:
        if not self.json_mode:
            self.console.print()
            self.console.print(f" ------- {title} ------- ", style="bold")
            self.console.print()

    def table(
        self,
        title: str,
        columns: list[str],
        rows: list[list[str]],
        *,
        data_key: str | None = None,
    ) -> None:
        """Render rows as a rich table, or as a list of objects in JSON mode.

        The JSON key defaults to the lower-cased, underscored title.
        """
        if self.json_mode:
            key = data_key or title.lower().replace(" ", "_")
            self._data[key] = [dict(zip(columns, row)) for row in rows]
            return

        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column(columns[0])
        for col in columns[1:]:
            table.add_column(col, justify="right")
        for row in rows:
            table.add_row(*row)
        self.console.print(table)

    def set_data(self, key: str, value: Any) -> None:
        self._data[key] = value

    @property
    def exit_code(self) -> int:
        return self._exit_code

    def finish(self) -> int:
        """Emit the JSON document (JSON mode only) and return the exit code."""
        if self.json_mode:
            self._data["exit_code"] = self._exit_code
            print(json.dumps(self._data, indent=2, default=str))
        return self._exit_code


def format_elapsed(seconds: float) -> str:
    """Seconds as "Xm Ys" past a minute, "Xs" below."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    mins, secs = divmod(int(seconds), 60)
    return f"{mins}m {secs}s"
