"""Read a document from disk and return its normalized text.

Only text-like formats are read directly. Binary formats (PDF, DOCX) must be
converted to text before ingest.
"""

from __future__ import annotations

from pathlib import Path

from docchat.errors import UnsupportedInputError
from docchat.ingest.base import normalize_text
from docchat.models import DocumentMetadata

_TEXT_TYPES: dict[str, str] = {
    ".txt": "text/plain",
    ".text": "text/plain",
    ".log": "text/plain",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".rst": "text/x-rst",
    ".csv": "text/csv",
}

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(_TEXT_TYPES)


def detect_file_type(path: Path) -> str | None:
    """Return the MIME type for *path*, or None if it is not a supported text type."""
    return _TEXT_TYPES.get(path.suffix.lower())


def load_document(
    path: Path,
    document_id: str | None = None,
) -> tuple[str, DocumentMetadata]:
    """Read *path* and return ``(normalized_text, metadata)``.

    Raises:
        UnsupportedInputError: If the extension is not a supported text type,
            the file is not valid UTF-8, or it cannot be read.
    """
    file_type = detect_file_type(path)
    if file_type is None:
        raise UnsupportedInputError(
            f"Unsupported file type {path.suffix!r} for '{path.name}'. "
            f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )
    try:
        raw = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise UnsupportedInputError(
            f"'{path.name}' is not valid UTF-8 text (byte {exc.start}). "
            "Re-save it as UTF-8 before ingesting."
        ) from exc
    except OSError as exc:
        raise UnsupportedInputError(f"Cannot read '{path}': {exc}") from exc

    metadata = DocumentMetadata(filename=path.name, file_type=file_type)
    if document_id:
        metadata.document_id = document_id
    return normalize_text(raw), metadata
