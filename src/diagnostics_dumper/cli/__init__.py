"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="diagnostics-dumper",
    help="Diagnostics Dumper - keep a JSON snapshot of every diagnostic in a project",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"diagnostics-dumper {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Diagnostics Dumper - keep a JSON snapshot of every diagnostic in a project."""


# Import subcommands to register them
from .watch import watch as _watch  # noqa: F401, E402
from .dump import dump as _dump  # noqa: F401, E402
from .info import where as _where, check as _check  # noqa: F401, E402
