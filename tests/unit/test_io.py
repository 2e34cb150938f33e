"""Tests for document loading, validation and serialization."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from screenmap.document.errors import DocumentValidationError, ScreenNotFoundError
from screenmap.document.io import (
    dumps_document,
    load_document,
    loads_document,
    new_document,
    parse_document,
    save_document,
    screen_view,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestNewDocument:
    """Test new_document."""

    def test_single_default_screen(self) -> None:
        """A new document holds one empty screen."""
        assert new_document("intro") == {
            "intro": {"background": "", "key_item_unlocks": {}, "triggers": {}}
        }

    def test_default_id(self) -> None:
        """The default screen is called start."""
        assert list(new_document()) == ["start"]

    def test_empty_id_rejected(self) -> None:
        """The initial screen needs an ID."""
        with pytest.raises(ValueError, match="non-empty"):
            new_document("")


class TestParseDocument:
    """Test parse_document and loads_document."""

    def test_valid_document_returned_as_is(self, rich_doc: dict[str, Any]) -> None:
        """Validation does not normalize the raw mapping."""
        doc = parse_document(rich_doc)

        assert doc == rich_doc
        assert doc["start"] is rich_doc["start"]

    def test_unknown_keys_preserved(self) -> None:
        """Extra keys survive validation."""
        data = {"s": {"background": "", "triggers": {}, "music": "theme.ogg"}}

        assert parse_document(data)["s"]["music"] == "theme.ogg"

    def test_empty_document_rejected(self) -> None:
        """Documents need at least one screen."""
        with pytest.raises(DocumentValidationError) as exc_info:
            parse_document({})

        assert any("at least one screen" in e for e in exc_info.value.errors)

    def test_non_object_rejected(self) -> None:
        """The top level must be a JSON object."""
        with pytest.raises(DocumentValidationError, match="validation failed"):
            parse_document(["start"], source="map.json")

    def test_errors_include_location(self) -> None:
        """Validation messages name the offending field."""
        data = {
            "s": {
                "triggers": {
                    "inspect": {
                        "message": "",
                        "options": [
                            {"label": "x", "message": "", "grants_item": {"id": "a", "type": "gem"}}
                        ],
                    }
                }
            }
        }

        with pytest.raises(DocumentValidationError) as exc_info:
            parse_document(data, source="map.json")

        assert exc_info.value.source == "map.json"
        assert any("options.0.grants_item.type" in e for e in exc_info.value.errors)

    def test_empty_additional_message_rejected(self) -> None:
        """A present progressive message map holds at least one entry."""
        data = {
            "s": {
                "triggers": {
                    "inspect": {
                        "message": "",
                        "options": [{"label": "x", "message": "", "additional_message": {}}],
                    }
                }
            }
        }

        with pytest.raises(DocumentValidationError):
            parse_document(data)

    def test_malformed_json_reports_position(self) -> None:
        """JSON syntax errors carry the line number."""
        with pytest.raises(DocumentValidationError) as exc_info:
            loads_document('{\n  "start": {,\n}', source="broken.json")

        assert exc_info.value.errors[0].startswith("line 2")


class TestSaveAndLoad:
    """Test file round trips."""

    def test_save_then_load(self, tmp_path: Path, rich_doc: dict[str, Any]) -> None:
        """Saved documents load back equal."""
        path = save_document(rich_doc, tmp_path / "maps" / "game.json")

        assert path.exists()
        assert load_document(path) == rich_doc
        assert not (tmp_path / "maps" / "game.json.tmp").exists()

    def test_dumps_uses_indent_and_unicode(self) -> None:
        """Output is indented and keeps non-ASCII text."""
        text = dumps_document({"café": {"background": ""}}, indent=4)

        assert text.endswith("\n")
        assert '    "café"' in text
        assert json.loads(text) == {"café": {"background": ""}}

    def test_missing_file(self, tmp_path: Path) -> None:
        """Missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_document(tmp_path / "nope.json")

    def test_invalid_file(self, tmp_path: Path) -> None:
        """Invalid content names the file."""
        path = tmp_path / "bad.json"
        path.write_text('{"s": {"background": 3}}', encoding="utf-8")

        with pytest.raises(DocumentValidationError) as exc_info:
            load_document(path)

        assert exc_info.value.source == str(path)


class TestScreenView:
    """Test screen_view."""

    def test_typed_view(self, rich_doc: dict[str, Any]) -> None:
        """The view exposes typed fields and ordered messages."""
        screen = screen_view(rich_doc, "start")

        option = screen.triggers["inspect"].options[0]
        assert option.grants_item is not None
        assert option.grants_item.type == "key"
        assert [n for n, _ in option.ordered_messages()] == [2, 10]
        assert screen.triggers["up"].hidden is True

    def test_unknown_screen(self, rich_doc: dict[str, Any]) -> None:
        """Missing screens raise ScreenNotFoundError."""
        with pytest.raises(ScreenNotFoundError):
            screen_view(rich_doc, "vault")
