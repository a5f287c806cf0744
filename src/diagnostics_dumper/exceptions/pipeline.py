"""Pipeline exceptions: source queries, malformed data, snapshot writes, commands."""

from pathlib import Path
from typing import Any, Optional

from .base import DiagnosticsDumperError


class SourceQueryError(DiagnosticsDumperError):
    """Raised when the diagnostic source fails to answer a query."""

    def __init__(self, reason: str):
        super().__init__(f"Diagnostic source query failed: {reason}", details={"reason": reason})
        self.reason = reason


class MalformedDiagnosticError(SourceQueryError):
    """Raised when the source hands back a diagnostic that cannot be read."""

    def __init__(self, reason: str, record: Optional[Any] = None):
        super().__init__(reason)
        self.message = f"Malformed diagnostic: {reason}"
        if record is not None:
            self.details["record"] = repr(record)[:200]
        self.record = record


class SnapshotWriteError(DiagnosticsDumperError):
    """Raised when the snapshot file or its directory cannot be written."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot write snapshot: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class UnknownCommandError(DiagnosticsDumperError):
    """Raised when executing a command id nobody registered."""

    def __init__(self, command_id: str):
        super().__init__(f"Unknown command: {command_id}", details={"command": command_id})
        self.command_id = command_id
