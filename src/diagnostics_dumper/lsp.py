"""Feed a diagnostic source from Language Server Protocol notifications.

Reads JSON-RPC messages from a byte stream, either framed with
``Content-Length`` headers (the LSP base protocol) or written one JSON
object per line, and applies every ``textDocument/publishDiagnostics``
notification to an :class:`InMemoryDiagnosticSource`. Everything else
(requests, responses, other notifications) is ignored.
"""

from __future__ import annotations

import json
import logging
from typing import Any, BinaryIO, Iterator, Mapping, Optional
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from .exceptions import MalformedDiagnosticError
from .models import Diagnostic, DiagnosticCode
from .source import InMemoryDiagnosticSource

logger = logging.getLogger(__name__)

PUBLISH_DIAGNOSTICS = "textDocument/publishDiagnostics"

# LSP DiagnosticSeverity is 1-based (Error = 1 ... Hint = 4)
LSP_SEVERITY_OFFSET = 1


def uri_to_path(uri: str) -> Optional[str]:
    """Convert a ``file://`` URI to a local absolute path; other schemes give ``None``."""
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        return None
    path = url2pathname(unquote(parsed.path))
    if parsed.netloc and parsed.netloc != "localhost":
        # UNC share
        return f"//{parsed.netloc}{path}"
    return path


def diagnostic_from_lsp(raw: Mapping[str, Any]) -> Diagnostic:
    """Convert one LSP ``Diagnostic`` object.

    Raises:
        MalformedDiagnosticError: If the object lacks a message or range.
    """
    if not isinstance(raw, Mapping):
        raise MalformedDiagnosticError("expected an object", record=raw)

    lsp_severity = raw.get("severity", 1)
    if not isinstance(lsp_severity, int) or not 1 <= lsp_severity <= 4:
        raise MalformedDiagnosticError(
            f"LSP severity must be 1-4, got {lsp_severity!r}", record=raw
        )

    data = dict(raw)
    data["severity"] = lsp_severity - LSP_SEVERITY_OFFSET
    diagnostic = Diagnostic.from_dict(data)

    description = raw.get("codeDescription")
    if isinstance(description, Mapping) and description.get("href") and diagnostic.code is not None:
        code = diagnostic.code_value
        return Diagnostic(
            message=diagnostic.message,
            severity=diagnostic.severity,
            range=diagnostic.range,
            source=diagnostic.source,
            code=DiagnosticCode(value=code, target=str(description["href"])),
        )
    return diagnostic


def read_messages(stream: BinaryIO) -> Iterator[Any]:
    """Yield decoded JSON-RPC messages until the stream ends."""
    while True:
        line = stream.readline()
        if not line:
            return
        stripped = line.strip()
        if not stripped:
            continue

        if stripped[:1] in (b"{", b"["):
            body = stripped
        else:
            headers = _read_headers(stream, first=stripped)
            if headers is None:
                return
            length = headers.get("content-length")
            if length is None or not length.isdigit():
                logger.warning("Skipping message without a valid Content-Length header")
                continue
            body = stream.read(int(length))
            if len(body) < int(length):
                logger.warning("Stream ended inside a message body; dropping it")
                return

        try:
            yield json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Skipping unparsable message: %s", e)


def _read_headers(stream: BinaryIO, first: bytes) -> Optional[dict[str, str]]:
    headers: dict[str, str] = {}
    line = first
    while True:
        name, sep, value = line.decode("ascii", errors="replace").partition(":")
        if sep:
            headers[name.strip().lower()] = value.strip()
        line = stream.readline()
        if not line:
            return None
        line = line.strip()
        if not line:
            return headers


class LspDiagnosticsReader:
    """Applies publishDiagnostics notifications to an in-memory source."""

    def __init__(self, source: InMemoryDiagnosticSource) -> None:
        self.source = source
        self.applied = 0

    def handle_message(self, message: Any) -> bool:
        """Apply one message. Returns True if it updated the source."""
        if isinstance(message, list):
            # JSON-RPC batch
            results = [self.handle_message(m) for m in message]
            return any(results)

        if not isinstance(message, Mapping) or message.get("method") != PUBLISH_DIAGNOSTICS:
            return False

        params = message.get("params")
        if not isinstance(params, Mapping) or not isinstance(params.get("uri"), str):
            logger.warning("Skipping publishDiagnostics without a uri")
            return False

        path = uri_to_path(params["uri"])
        if path is None:
            logger.debug("Skipping non-file document %s", params["uri"])
            return False

        diagnostics = []
        for raw in params.get("diagnostics") or []:
            try:
                diagnostics.append(diagnostic_from_lsp(raw))
            except MalformedDiagnosticError as e:
                logger.warning("Skipping diagnostic for %s: %s", path, e)

        self.source.set(path, diagnostics)
        self.applied += 1
        return True

    def consume(self, stream: BinaryIO) -> int:
        """Apply every message from ``stream`` until EOF; returns notifications applied."""
        before = self.applied
        for message in read_messages(stream):
            self.handle_message(message)
        return self.applied - before
