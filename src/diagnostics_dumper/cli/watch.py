"""``diagnostics-dumper watch``: keep the snapshot current from an LSP stream."""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape

from . import app
from ._common import build_config_store, build_workspace, console, handle_errors
from ..lifecycle import DumperSession
from ..logging_config import setup_logging
from ..lsp import LspDiagnosticsReader
from ..source import InMemoryDiagnosticSource

logger = logging.getLogger(__name__)


@app.command()
def watch(
    workspace: List[Path] = typer.Option(
        [], "--workspace", "-w", help="Workspace folder (repeatable; the first is the project root)"
    ),
    active_file: Optional[Path] = typer.Option(
        None, "--active-file", help="File open in the editor, used when no workspace is given"
    ),
    input_file: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        help="Read LSP messages from this file instead of stdin",
        exists=True,
        dir_okay=False,
    ),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    exclude: List[str] = typer.Option([], "--exclude", "-e", help="Exclude pattern (repeatable)"),
    debounce_ms: Optional[int] = typer.Option(None, "--debounce-ms", min=0, help="Debounce window in ms"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only log errors"),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also append logs to this file", dir_okay=False
    ),
) -> None:
    """
    Write a snapshot, then rewrite it as LSP diagnostics arrive.

    Reads JSON-RPC messages (Content-Length framed or one per line) and
    applies every [bold]textDocument/publishDiagnostics[/bold] notification.
    At end of input one last snapshot is written.

    [bold cyan]Examples:[/bold cyan]

      my-lsp-tap | diagnostics-dumper watch -w .

      diagnostics-dumper watch -w . -e "build/**" --input session.jsonl
    """
    with handle_errors():
        store = build_config_store(config, exclude, debounce_ms, verbose, quiet)
        setup_logging(store.current().verbosity, log_file=log_file)
        source = InMemoryDiagnosticSource()
        session = DumperSession(source, build_workspace(workspace, active_file), store)
        path = session.start()
        console.print(f"[bold]Writing[/bold] {escape(str(path))}")

        reader = LspDiagnosticsReader(source)
        try:
            if input_file is not None:
                with open(input_file, "rb") as f:
                    reader.consume(f)
            else:
                reader.consume(sys.stdin.buffer)
            path = session.dump_now()
        except KeyboardInterrupt:
            logger.debug("Interrupted, stopping")
        finally:
            session.stop()

    console.print(
        f"[green]Done[/green]: {reader.applied} notification(s), snapshot at {escape(str(path))}"
    )
