"""``where`` and ``check``: inspect output location and exclusion decisions."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from . import app
from ._common import build_config_store, build_workspace, console, handle_errors
from ..exclusion import ExclusionFilter
from ..snapshot import read_snapshot
from ..workspace import resolve_output_path


@app.command()
def where(
    workspace: List[Path] = typer.Option([], "--workspace", "-w", help="Workspace folder (repeatable)"),
    active_file: Optional[Path] = typer.Option(None, "--active-file", help="File open in the editor"),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
) -> None:
    """Print the path the snapshot is written to."""
    with handle_errors():
        store = build_config_store(config)
        path = resolve_output_path(build_workspace(workspace, active_file), store.current().output_filename)

    console.print(escape(str(path)), highlight=False, soft_wrap=True)
    if path.is_file():
        try:
            entries = read_snapshot(path)
        except (OSError, ValueError):
            console.print("[yellow]Existing file is not a readable snapshot[/yellow]")
        else:
            console.print(f"[dim]{len(entries)} file(s) in current snapshot[/dim]")


@app.command()
def check(
    paths: List[Path] = typer.Argument(..., help="Files to test against the exclude patterns"),
    workspace: List[Path] = typer.Option([], "--workspace", "-w", help="Workspace folder (repeatable)"),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    exclude: List[str] = typer.Option([], "--exclude", "-e", help="Exclude pattern (repeatable)"),
) -> None:
    """Show whether each PATH would be left out of the snapshot."""
    with handle_errors():
        store = build_config_store(config, exclude)
        exclusion = ExclusionFilter(build_workspace(workspace), store)

    table = Table(show_header=True, header_style="bold")
    table.add_column("File", overflow="fold")
    table.add_column("Status", no_wrap=True)
    for path in paths:
        file_path = str(path.resolve())
        status = "[red]excluded[/red]" if exclusion.is_excluded(file_path) else "[green]included[/green]"
        table.add_row(escape(file_path), status)
    console.print(table)
