"""
Diagnostics Dumper - keeps a JSON snapshot of every diagnostic a project has.

Pulls the full diagnostic world from a source whenever it changes, remembers
every file that ever had problems so fixed files show up as clean, honours
user exclude patterns, and rewrites ``vscode-diagnostics.json`` after each
debounced burst of updates.
"""

__version__ = "0.1.0"

from .aggregator import SnapshotAggregator
from .config import ConfigStore, DumperConfig, load_config
from .lifecycle import DumperSession
from .models import Diagnostic, DiagnosticCode, FileEntry, Position, Range, Severity
from .source import DiagnosticSource, InMemoryDiagnosticSource
from .workspace import TextDocument, Workspace, resolve_output_directory

__all__ = [
    "DumperSession",
    "SnapshotAggregator",
    "ConfigStore",
    "DumperConfig",
    "load_config",
    "Diagnostic",
    "DiagnosticCode",
    "FileEntry",
    "Position",
    "Range",
    "Severity",
    "DiagnosticSource",
    "InMemoryDiagnosticSource",
    "TextDocument",
    "Workspace",
    "resolve_output_directory",
]
