"""Tests for snapshot shaping, serialization and writes."""

import json

import pytest

from diagnostics_dumper.exceptions import SnapshotWriteError
from diagnostics_dumper.models import DiagnosticCode, FileEntry, Severity
from diagnostics_dumper.snapshot import (
    SNAPSHOT_FILENAME,
    read_snapshot,
    serialize_snapshot,
    shape_diagnostic,
    write_snapshot,
)


class TestShapeDiagnostic:
    def test_full_shape(self, make_diagnostic):
        d = make_diagnostic(
            message="Cannot find name 'foo'",
            severity=Severity.Error,
            line=4,
            character=2,
            end_line=4,
            end_character=5,
            source="ts",
            code=2304,
        )
        assert shape_diagnostic(d) == {
            "message": "Cannot find name 'foo'",
            "severity": 0,
            "level": "Error",
            "source": "ts",
            "code": 2304,
            "start": {"line": 4, "character": 2},
            "end": {"line": 4, "character": 5},
        }

    def test_structured_code_serializes_as_scalar(self, make_diagnostic):
        d = make_diagnostic(code=DiagnosticCode(value="E123"))
        assert shape_diagnostic(d)["code"] == "E123"

    def test_scalar_code_serializes_unchanged(self, make_diagnostic):
        assert shape_diagnostic(make_diagnostic(code=42))["code"] == 42

    def test_absent_source_and_code_are_omitted(self, make_diagnostic):
        shaped = shape_diagnostic(make_diagnostic())
        assert "source" not in shaped
        assert "code" not in shaped

    def test_level_follows_severity(self, make_diagnostic):
        shaped = shape_diagnostic(make_diagnostic(severity=Severity.Hint))
        assert shaped["severity"] == 3
        assert shaped["level"] == "Hint"


class TestSerialize:
    def test_empty_snapshot(self):
        assert serialize_snapshot([]) == "[]"

    def test_two_space_indent(self, make_diagnostic):
        text = serialize_snapshot([FileEntry(file="/p/a.ts", diagnostics=[make_diagnostic()])])
        lines = text.splitlines()
        assert lines[0] == "["
        assert lines[1] == "  {"
        assert lines[2].startswith('    "file": ')

    def test_clean_file_has_empty_list(self):
        data = json.loads(serialize_snapshot([FileEntry(file="/p/a.ts")]))
        assert data == [{"file": "/p/a.ts", "diagnostics": []}]

    def test_non_ascii_kept_verbatim(self, make_diagnostic):
        text = serialize_snapshot([FileEntry(file="/p/ü.ts", diagnostics=[make_diagnostic(message="变量未使用")])])
        assert "变量未使用" in text
        assert "/p/ü.ts" in text


class TestWriteSnapshot:
    def test_creates_missing_directory(self, tmp_path):
        path = tmp_path / "deep" / "er" / SNAPSHOT_FILENAME
        write_snapshot(path, [])
        assert read_snapshot(path) == []

    def test_overwrites_existing_content(self, tmp_path):
        path = tmp_path / SNAPSHOT_FILENAME
        path.write_text("stale garbage that is not json", encoding="utf-8")
        write_snapshot(path, [FileEntry(file="/p/a.ts")])
        assert read_snapshot(path) == [{"file": "/p/a.ts", "diagnostics": []}]

    def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(SnapshotWriteError) as exc_info:
            write_snapshot(blocker / SNAPSHOT_FILENAME, [])
        assert exc_info.value.filepath == blocker / SNAPSHOT_FILENAME

    def test_written_as_utf8(self, tmp_path, make_diagnostic):
        path = tmp_path / SNAPSHOT_FILENAME
        write_snapshot(path, [FileEntry(file="/p/a.ts", diagnostics=[make_diagnostic(message="é")])])
        assert "é" in path.read_bytes().decode("utf-8")
