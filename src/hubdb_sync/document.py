"""Local table document I/O.

A table document is a UTF-8 JSON file shaped like ``CanonicalDocument``.
Paths are checked before any network call: documents must use the
``.json`` extension, and a document being read must be an existing
regular file.

Usage:
    from hubdb_sync.document import read_document, write_document

    document = read_document("events.hubdb.json")
    write_document("events.hubdb.json", document)
"""

import json
from pathlib import Path

import pydantic

from hubdb_sync.errors import ValidationError
from hubdb_sync.table.models import CanonicalDocument


def validate_json_path(path: str | Path) -> Path:
    """Check that a path has the ``.json`` extension.

    Raises:
        ValidationError: If the extension is not ``.json``.
    """
    path = Path(path)
    if path.suffix != ".json":
        raise ValidationError('The HubDB table file must be a ".json" file')
    return path


def validate_json_file(path: str | Path) -> Path:
    """Check that a path is an existing regular ``.json`` file.

    Raises:
        ValidationError: If the path is not a regular file or lacks the
            ``.json`` extension.
    """
    path = Path(path)
    if not path.is_file():
        raise ValidationError(f'The "{path}" path is not a path to a file')
    return validate_json_path(path)


def read_document(path: str | Path) -> CanonicalDocument:
    """Validate and load a table document.

    Args:
        path: Path to the ``.json`` document.

    Returns:
        The parsed ``CanonicalDocument``.

    Raises:
        ValidationError: If the path is invalid, the file is not valid
            JSON, or its content does not match the document shape.
    """
    path = validate_json_file(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return CanonicalDocument.model_validate(data)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {path}: {e}") from e
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid table document {path}: {e}") from e


def write_document(path: str | Path, document: CanonicalDocument) -> Path:
    """Write a document as 2-space indented JSON, creating parent directories.

    Returns:
        The path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(document.to_json_dict(), indent=2, ensure_ascii=False)
    path.write_text(content + "\n", encoding="utf-8")
    return path
