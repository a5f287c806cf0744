"""
Logging setup for the dumper's commands.

Records go to stderr through rich, so stdout stays free for command output
(``where`` prints a path that scripts capture). A long-running ``watch`` can
also append plain-text records to a file.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "diagnostics_dumper"

# Config verbosity -> level
LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    verbosity: str = "normal", log_file: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """
    Install a rich stderr handler (plus an optional file handler) on the root logger.

    Args:
        verbosity: ``quiet``, ``normal`` or ``verbose``, as in DumperConfig
        log_file: File to append records to, if any

    Returns:
        The package logger
    """
    level = LEVELS.get(verbosity, logging.INFO)
    verbose = level == logging.DEBUG

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            # File paths in messages may contain [brackets]
            markup=False,
            show_path=verbose,
        )
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    # force=True so repeated CLI invocations in one process replace old handlers
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    return logger
