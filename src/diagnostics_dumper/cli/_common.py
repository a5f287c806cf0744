"""Shared CLI helpers."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import ConfigStore
from ..exceptions import DiagnosticsDumperError
from ..workspace import TextDocument, Workspace

console = Console()
err_console = Console(stderr=True)


def build_workspace(folders: List[Path], active_file: Optional[Path] = None) -> Workspace:
    """Workspace from CLI options; folders are made absolute."""
    document = None
    if active_file is not None:
        document = TextDocument(path=str(active_file.resolve()))
    return Workspace(
        folders=[folder.resolve() for folder in folders],
        active_document=document,
    )


def build_config_store(
    config: Optional[Path] = None,
    exclude: Optional[List[str]] = None,
    debounce_ms: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> ConfigStore:
    """Build the live config store from CLI options.

    Options left unset fall through to config files and environment.
    """
    overrides = {}
    if exclude:
        overrides["exclude_patterns"] = list(exclude)
    if debounce_ms is not None:
        overrides["debounce_ms"] = debounce_ms
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    store = ConfigStore(config_file=config, **overrides)
    # Surface config errors before any work starts
    store.current()
    return store


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn project errors into a red message and the error's exit code."""
    try:
        yield
    except DiagnosticsDumperError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(e.exit_code)
