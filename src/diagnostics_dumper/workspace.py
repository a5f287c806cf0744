"""Workspace view and output directory resolution."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .snapshot import SNAPSHOT_FILENAME

FILE_SCHEME = "file"


@dataclass(frozen=True)
class TextDocument:
    """The document focused in the editor.

    ``scheme`` is ``"file"`` for filesystem-backed documents; anything else
    (``"untitled"``, virtual schemes) has no usable directory.
    """

    path: str
    scheme: str = FILE_SCHEME

    @property
    def is_file_backed(self) -> bool:
        return self.scheme == FILE_SCHEME


@dataclass
class Workspace:
    """Open project folders plus the active document, if any."""

    folders: list[Path] = field(default_factory=list)
    active_document: Optional[TextDocument] = None

    @property
    def root(self) -> Optional[Path]:
        """The first workspace folder, which acts as the project root."""
        if self.folders:
            return Path(self.folders[0])
        return None


def resolve_output_directory(workspace: Workspace) -> Path:
    """Pick the directory the snapshot is written into.

    Priority:
        1. The first workspace folder.
        2. The directory of the active document, if it is file-backed.
        3. The system temporary directory.

    Never fails and never touches the filesystem beyond reading the
    temp-dir location.
    """
    root = workspace.root
    if root is not None:
        return root

    doc = workspace.active_document
    if doc is not None and doc.is_file_backed:
        return Path(os.path.dirname(doc.path))

    return Path(tempfile.gettempdir())


def resolve_output_path(workspace: Workspace, filename: str = SNAPSHOT_FILENAME) -> Path:
    return resolve_output_directory(workspace) / filename


def relative_to_root(file_path: str, root: Optional[Path]) -> str:
    """Return ``file_path`` relative to ``root`` when it lies under it, else unchanged."""
    if root is None:
        return file_path
    root_str = str(root).rstrip("/\\") or str(root)
    prefix = root_str if root_str.endswith(("/", "\\")) else root_str + os.sep
    # "/work" must not claim "/workbench/a.ts"
    if not file_path.startswith(prefix):
        return file_path
    return file_path[len(prefix):]
