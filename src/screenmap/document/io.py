"""Document loading, validation and serialization.

The interchange format is a UTF-8 JSON object whose top-level keys are
screen IDs. Loading validates the whole shape against the pydantic models and
then returns the raw mapping unchanged, so a load/save cycle is lossless.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from screenmap.document.errors import DocumentValidationError
from screenmap.document.fields import format_validation_errors
from screenmap.document.mutations import require_screen
from screenmap.document.screens import default_screen
from screenmap.models import Screen, ScreenDocument
from screenmap.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from screenmap.document.mutations import Document

log = get_logger(__name__)

DEFAULT_INDENT = 2


def new_document(screen_id: str = "start") -> Document:
    """Create a document holding a single default screen."""
    if not screen_id:
        raise ValueError("screen_id must be non-empty")
    return {screen_id: default_screen()}


def parse_document(data: Any, *, source: str = "") -> Document:
    """Validate decoded JSON as a screen document.

    Args:
        data: Decoded JSON value.
        source: Origin shown in error messages (e.g. file path).

    Returns:
        The same mapping, as a plain dict.

    Raises:
        DocumentValidationError: If the data does not match the schema.
    """
    if not isinstance(data, Mapping):
        raise DocumentValidationError(
            [f"<root>: expected a JSON object, got {type(data).__name__}"], source=source
        )
    try:
        ScreenDocument.model_validate(data)
    except ValidationError as e:
        raise DocumentValidationError(format_validation_errors(e), source=source) from e
    return dict(data)


def loads_document(text: str, *, source: str = "") -> Document:
    """Parse and validate a document from JSON text.

    Raises:
        DocumentValidationError: If the text is not JSON or fails validation.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentValidationError(
            [f"line {e.lineno} column {e.colno}: {e.msg}"], source=source
        ) from e
    return parse_document(data, source=source)


def load_document(path: Path) -> Document:
    """Load and validate a document file.

    Raises:
        FileNotFoundError: If the file does not exist.
        DocumentValidationError: If the content is invalid.
    """
    doc = loads_document(path.read_text(encoding="utf-8"), source=str(path))
    log.debug("document_loaded", path=str(path), screens=len(doc))
    return doc


def dumps_document(doc: Mapping[str, Any], *, indent: int = DEFAULT_INDENT) -> str:
    """Serialize a document to JSON text with stable indentation."""
    return json.dumps(doc, indent=indent, ensure_ascii=False) + "\n"


def save_document(
    doc: Mapping[str, Any], path: Path, *, indent: int = DEFAULT_INDENT
) -> Path:
    """Write a document to *path* atomically.

    Returns:
        The path written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp_path.write_text(dumps_document(doc, indent=indent), encoding="utf-8")
        tmp_path.replace(path)
    except Exception:
        if tmp_path.exists():
            tmp_path.unlink()
        raise
    log.debug("document_saved", path=str(path), screens=len(doc))
    return path


def screen_view(doc: Mapping[str, Any], screen_id: str) -> Screen:
    """Return a validated, typed view of one screen.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        DocumentValidationError: If the screen does not match the schema.
    """
    raw = require_screen(doc, screen_id, context="screen_view")
    try:
        return Screen.model_validate(raw)
    except ValidationError as e:
        raise DocumentValidationError(format_validation_errors(e), source=screen_id) from e
