"""Data models: Diagnostic, its location types, and FileEntry."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Mapping, Optional, Union

from .exceptions import MalformedDiagnosticError


class Severity(IntEnum):
    """Diagnostic severity ordinal. Lower is more severe."""

    Error = 0
    Warning = 1
    Information = 2
    Hint = 3

    @property
    def label(self) -> str:
        """Human-readable label derived from the ordinal."""
        return self.name


@dataclass(frozen=True)
class Position:
    """Zero-based line and character offset."""

    line: int
    character: int

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position


@dataclass(frozen=True)
class DiagnosticCode:
    """Structured diagnostic code: a scalar ``value`` plus an optional link target."""

    value: Union[str, int]
    target: Optional[str] = None


CodeLike = Union[str, int, DiagnosticCode, None]


@dataclass(frozen=True)
class Diagnostic:
    """One issue reported against a location in a file.

    Instances are supplied by a diagnostic source and never mutated here;
    output shaping copies fields into plain dicts.
    """

    message: str
    severity: Severity
    range: Range
    source: Optional[str] = None
    code: CodeLike = None

    @property
    def code_value(self) -> Union[str, int, None]:
        """The bare scalar code, whether supplied as a scalar or structured."""
        if isinstance(self.code, DiagnosticCode):
            return self.code.value
        return self.code

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Diagnostic":
        """Build a Diagnostic from plain data.

        Accepts both the snapshot output shape (``start``/``end`` at the top
        level) and the LSP shape (``range.start``/``range.end``). ``severity``
        is taken as an ordinal 0-3; ``code`` may be a scalar or a mapping with
        a ``value`` key.

        Raises:
            MalformedDiagnosticError: If a required field is missing or has the
                wrong type.
        """
        if not isinstance(data, Mapping):
            raise MalformedDiagnosticError("expected an object", record=data)

        message = data.get("message")
        if not isinstance(message, str):
            raise MalformedDiagnosticError("'message' must be a string", record=data)

        try:
            severity = Severity(data.get("severity", Severity.Error))
        except (ValueError, TypeError):
            raise MalformedDiagnosticError(
                f"'severity' must be an integer 0-3, got {data.get('severity')!r}", record=data
            )

        if "range" in data:
            range_data = data["range"]
            if not isinstance(range_data, Mapping):
                raise MalformedDiagnosticError("'range' must be an object", record=data)
            start, end = range_data.get("start"), range_data.get("end")
        else:
            start, end = data.get("start"), data.get("end")

        source = data.get("source")
        if source is not None and not isinstance(source, str):
            raise MalformedDiagnosticError("'source' must be a string", record=data)

        return cls(
            message=message,
            severity=severity,
            range=Range(start=_parse_position(start, data), end=_parse_position(end, data)),
            source=source,
            code=_parse_code(data.get("code"), data),
        )


def _parse_position(raw: Any, record: Any) -> Position:
    if not isinstance(raw, Mapping):
        raise MalformedDiagnosticError("position must be an object with line/character", record=record)
    line, character = raw.get("line"), raw.get("character")
    for name, value in (("line", line), ("character", character)):
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise MalformedDiagnosticError(f"'{name}' must be a non-negative integer", record=record)
    return Position(line=line, character=character)


def _parse_code(raw: Any, record: Any) -> CodeLike:
    if raw is None or isinstance(raw, (str, int)) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, Mapping):
        value = raw.get("value")
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            target = raw.get("target")
            return DiagnosticCode(value=value, target=str(target) if target is not None else None)
    raise MalformedDiagnosticError(f"'code' must be a string, integer or {{value}} object", record=record)


@dataclass
class FileEntry:
    """One row of a snapshot: a file and its (possibly empty) diagnostics."""

    file: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
