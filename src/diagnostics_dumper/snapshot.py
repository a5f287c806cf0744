"""Snapshot shaping, serialization and on-disk writes.

The on-disk format is a pretty-printed JSON array of file entries::

    [
      {
        "file": "/abs/path.ts",
        "diagnostics": [
          {"message": ..., "severity": 0, "level": "Error", "source": ...,
           "code": ..., "start": {...}, "end": {...}}
        ]
      }
    ]

``source`` and ``code`` are left out of a diagnostic when the source did not
supply them.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Sequence

from .exceptions import SnapshotWriteError
from .models import Diagnostic, FileEntry

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "vscode-diagnostics.json"
JSON_INDENT = 2


def shape_diagnostic(diagnostic: Diagnostic) -> dict[str, Any]:
    """Reshape a Diagnostic into its output dict."""
    shaped: dict[str, Any] = {
        "message": diagnostic.message,
        "severity": int(diagnostic.severity),
        "level": diagnostic.severity.label,
    }
    if diagnostic.source is not None:
        shaped["source"] = diagnostic.source
    code = diagnostic.code_value
    if code is not None:
        shaped["code"] = code
    shaped["start"] = diagnostic.range.start.to_dict()
    shaped["end"] = diagnostic.range.end.to_dict()
    return shaped


def shape_entry(entry: FileEntry) -> dict[str, Any]:
    return {
        "file": entry.file,
        "diagnostics": [shape_diagnostic(d) for d in entry.diagnostics],
    }


def serialize_snapshot(entries: Sequence[FileEntry]) -> str:
    """Render entries as the pretty-printed JSON document."""
    return json.dumps([shape_entry(e) for e in entries], indent=JSON_INDENT, ensure_ascii=False)


def write_snapshot(path: Path, entries: Sequence[FileEntry]) -> Path:
    """Overwrite ``path`` with the serialized snapshot.

    The parent directory is created if missing. Serialization happens before
    the file is opened, so a failure there leaves the previous file intact.

    Raises:
        SnapshotWriteError: If the directory or file cannot be written.
    """
    content = serialize_snapshot(entries)
    path = Path(path)

    try:
        os.makedirs(path.parent, exist_ok=True)
    except OSError as e:
        raise SnapshotWriteError(path, f"Cannot create directory: {e}")

    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise SnapshotWriteError(path, f"Write failed: {e}")

    logger.debug("Wrote %d bytes to %s", len(content), path)
    return path


def read_snapshot(path: Path) -> list[dict[str, Any]]:
    """Load a snapshot file back as plain data."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)
