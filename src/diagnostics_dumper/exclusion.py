"""Path exclusion: glob patterns matched against project-relative paths and bare names.

Each pattern is matched against the whole candidate string, as a shell glob
would: ``*`` stays within one path segment, ``**`` spans segments, and a
pattern never matches a file just because it names one of its parent
directories. Relative patterns therefore never match out-of-root files by
their absolute path, only by their bare name.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable

from wcmatch import glob

from .config import ConfigStore
from .workspace import Workspace, relative_to_root

logger = logging.getLogger(__name__)

GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.FORCEUNIX


def split_negation(pattern: str) -> tuple[bool, str]:
    """Strip leading ``!`` characters; an odd count negates the pattern."""
    negated = False
    while pattern.startswith("!"):
        negated = not negated
        pattern = pattern[1:]
    return negated, pattern


@lru_cache(maxsize=256)
def _warn_invalid(pattern: str, reason: str) -> None:
    # Cached so each bad pattern is reported once, not on every check
    logger.warning("Ignoring invalid exclude pattern %r: %s", pattern, reason)


def pattern_matches(pattern: str, candidates: Iterable[str]) -> bool:
    """True if ``pattern`` matches any candidate.

    ``#`` comments and patterns the glob engine rejects never match.
    """
    if pattern.startswith("#"):
        return False
    negated, body = split_negation(pattern)
    try:
        for candidate in candidates:
            if glob.globmatch(candidate, body, flags=GLOB_FLAGS) != negated:
                return True
    except Exception as e:
        _warn_invalid(pattern, str(e) or type(e).__name__)
    return False


class ExclusionFilter:
    """Decides whether a file is left out of snapshots.

    ``exclude_patterns`` is read from the config store on every call, so a
    configuration edit applies from the next check onward.
    """

    def __init__(self, workspace: Workspace, config_store: ConfigStore) -> None:
        self.workspace = workspace
        self.config_store = config_store

    def is_excluded(self, file_path: str) -> bool:
        patterns = self.config_store.get("excludePatterns", [])
        if not patterns:
            return False

        relative = relative_to_root(file_path, self.workspace.root).replace("\\", "/")
        name = file_path.replace("\\", "/").rsplit("/", 1)[-1]
        candidates = (relative, name)

        return any(pattern_matches(pattern, candidates) for pattern in patterns)

    __call__ = is_excluded
