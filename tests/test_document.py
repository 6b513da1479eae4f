"""Tests for local document validation and I/O."""

import json
from pathlib import Path

import pytest

from hubdb_sync.document import (
    read_document,
    validate_json_file,
    validate_json_path,
    write_document,
)
from hubdb_sync.errors import ValidationError
from hubdb_sync.table.models import CanonicalDocument, Row

SAMPLE = {
    "name": "events",
    "label": "Events",
    "useForPages": True,
    "columns": [{"name": "title", "label": "Title", "type": "TEXT"}],
    "rows": [{"path": "/a", "name": "A", "values": {"title": "Hello"}}],
}


class TestValidation:
    """Path checks run before anything is read."""

    def test_json_extension_required(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match='must be a ".json" file'):
            validate_json_path(tmp_path / "table.txt")

    def test_json_extension_accepted(self, tmp_path: Path) -> None:
        assert validate_json_path(tmp_path / "table.json") == tmp_path / "table.json"

    def test_missing_file_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="is not a path to a file"):
            validate_json_file(tmp_path / "missing.json")

    def test_directory_rejected(self, tmp_path: Path) -> None:
        directory = tmp_path / "dir.json"
        directory.mkdir()

        with pytest.raises(ValidationError, match="is not a path to a file"):
            validate_json_file(directory)

    def test_existing_non_json_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "table.yaml"
        path.write_text("{}")

        with pytest.raises(ValidationError, match='".json"'):
            validate_json_file(path)


class TestReadDocument:
    """read_document parses the canonical shape."""

    def test_reads_document(self, tmp_path: Path) -> None:
        path = tmp_path / "events.hubdb.json"
        path.write_text(json.dumps(SAMPLE), encoding="utf-8")

        doc = read_document(path)

        assert doc.name == "events"
        assert doc.use_for_pages is True
        assert doc.rows[0].path == "/a"
        assert doc.rows[0].values == {"title": "Hello"}

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ValidationError, match="Invalid JSON"):
            read_document(path)

    def test_wrong_shape(self, tmp_path: Path) -> None:
        """A document without a table name is rejected."""
        path = tmp_path / "noname.json"
        path.write_text(json.dumps({"columns": [], "rows": []}))

        with pytest.raises(ValidationError, match="Invalid table document"):
            read_document(path)

    def test_rows_default_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "bare.json"
        path.write_text(json.dumps({"name": "bare"}))

        assert read_document(path).rows == []


class TestWriteDocument:
    """write_document produces stable, readable JSON."""

    def test_written_document_reads_back(self, tmp_path: Path) -> None:
        path = tmp_path / "out.json"
        doc = CanonicalDocument.model_validate(SAMPLE)

        write_document(path, doc)

        assert read_document(path) == doc

    def test_indented_with_trailing_newline(self, tmp_path: Path) -> None:
        path = tmp_path / "out.json"

        write_document(path, CanonicalDocument(name="t", rows=[Row(path="/a")]))

        text = path.read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert '\n  "name": "t"' in text

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "deeper" / "out.json"

        write_document(path, CanonicalDocument(name="t"))

        assert path.is_file()
