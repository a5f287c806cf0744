"""Exception hierarchy for Diagnostics Dumper."""

from .base import DiagnosticsDumperError
from .config import (
    ConfigFileError,
    ConfigurationError,
    InvalidConfigError,
)
from .pipeline import (
    MalformedDiagnosticError,
    SnapshotWriteError,
    SourceQueryError,
    UnknownCommandError,
)

__all__ = [
    "DiagnosticsDumperError",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidConfigError",
    "SourceQueryError",
    "MalformedDiagnosticError",
    "SnapshotWriteError",
    "UnknownCommandError",
]
