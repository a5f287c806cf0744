"""Root of the Diagnostics Dumper error hierarchy."""

from typing import Any, ClassVar, Mapping, Optional


class DiagnosticsDumperError(Exception):
    """An error the dumper raises on purpose, as opposed to a bug.

    ``details`` is extra key/value context rendered after the message, e.g.
    the snapshot path that could not be written. ``exit_code`` is what the
    CLI exits with when the error reaches it.
    """

    exit_code: ClassVar[int] = 1

    def __init__(self, message: str, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = {key: str(value) for key, value in (details or {}).items()}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
