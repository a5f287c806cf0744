"""``diagnostics-dumper dump``: one-shot snapshot from a JSON diagnostics file."""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape

from . import app
from ._common import build_config_store, build_workspace, console, err_console, handle_errors
from ..lifecycle import DumperSession
from ..logging_config import setup_logging
from ..models import Diagnostic
from ..source import InMemoryDiagnosticSource


@app.command()
def dump(
    diagnostics_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="JSON object mapping absolute file paths to lists of diagnostics",
    ),
    workspace: List[Path] = typer.Option([], "--workspace", "-w", help="Workspace folder (repeatable)"),
    active_file: Optional[Path] = typer.Option(None, "--active-file", help="File open in the editor"),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    exclude: List[str] = typer.Option([], "--exclude", "-e", help="Exclude pattern (repeatable)"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """Reset the snapshot and write it once from DIAGNOSTICS_FILE."""
    setup_logging("verbose" if verbose else "quiet")

    try:
        data = json.loads(diagnostics_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] cannot read {escape(str(diagnostics_file))}: {escape(str(e))}")
        raise typer.Exit(1)
    if not isinstance(data, dict):
        err_console.print("[red]Error:[/red] expected a JSON object of path -> diagnostics")
        raise typer.Exit(1)

    with handle_errors():
        source = InMemoryDiagnosticSource()
        for file_path, raw_diagnostics in data.items():
            source.set(file_path, [Diagnostic.from_dict(raw) for raw in raw_diagnostics or []])

        store = build_config_store(config, exclude)
        with DumperSession(source, build_workspace(workspace, active_file), store) as session:
            path = session.output_path
            entries = len(session.aggregator.seen_files)

    console.print(f"[green]Wrote[/green] {entries} file(s) to {escape(str(path))}")
