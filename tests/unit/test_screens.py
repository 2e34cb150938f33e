"""Tests for screen lifecycle and screen-level field edits."""

from __future__ import annotations

import copy
from typing import Any

import pytest

from screenmap.document.errors import (
    DocumentValidationError,
    DuplicateIdentifierError,
    InvalidIdentifierError,
    LastScreenRemainingError,
    ScreenNotFoundError,
)
from screenmap.document.screens import (
    create_screen,
    default_screen,
    delete_screen,
    iter_next_screen_refs,
    rename_screen,
    set_background,
    set_key_item_unlocks,
)


class TestCreateScreen:
    """Test create_screen."""

    def test_inserts_default_screen(self, sample_doc: dict[str, Any]) -> None:
        """New screens have an empty background, unlocks and triggers."""
        doc, selected = create_screen(sample_doc, "vault")

        assert selected == "vault"
        assert doc["vault"] == {"background": "", "key_item_unlocks": {}, "triggers": {}}
        assert "vault" not in sample_doc

    def test_existing_screens_shared(self, sample_doc: dict[str, Any]) -> None:
        """Other screens are the same objects in the new document."""
        doc, _ = create_screen(sample_doc, "vault")

        assert doc["start"] is sample_doc["start"]
        assert list(doc) == ["start", "hall", "vault"]

    def test_default_screen_is_fresh(self) -> None:
        """Each default screen is a separate object."""
        assert default_screen() is not default_screen()
        assert default_screen()["triggers"] is not default_screen()["triggers"]

    def test_duplicate_rejected(self, sample_doc: dict[str, Any]) -> None:
        """Screen IDs are unique."""
        with pytest.raises(DuplicateIdentifierError) as exc_info:
            create_screen(sample_doc, "hall")

        assert exc_info.value.screen_id == "hall"

    @pytest.mark.parametrize("screen_id", ["", "   ", None])
    def test_invalid_identifier_rejected(
        self, sample_doc: dict[str, Any], screen_id: Any
    ) -> None:
        """Empty, blank and missing IDs are rejected."""
        with pytest.raises(InvalidIdentifierError):
            create_screen(sample_doc, screen_id)


class TestDeleteScreen:
    """Test delete_screen."""

    def test_removes_screen_and_reports_fallback(self, rich_doc: dict[str, Any]) -> None:
        """The first remaining screen is offered as the new selection."""
        doc, remaining, fallback = delete_screen(rich_doc, "start")

        assert "start" not in doc
        assert remaining == ["hall", "tower"]
        assert fallback == "hall"
        assert "start" in rich_doc

    def test_references_left_dangling(self, rich_doc: dict[str, Any]) -> None:
        """Triggers elsewhere keep naming the deleted screen."""
        result = delete_screen(rich_doc, "start")

        assert result.document["hall"]["triggers"]["left"]["next_screen"] == "start"
        assert result.document["hall"] is rich_doc["hall"]

    def test_last_screen_rejected(self) -> None:
        """A document always keeps at least one screen."""
        doc = {"only": default_screen()}

        with pytest.raises(LastScreenRemainingError):
            delete_screen(doc, "only")

        assert "only" in doc

    def test_unknown_screen_rejected(self, sample_doc: dict[str, Any]) -> None:
        """Missing screens are reported with the known IDs."""
        with pytest.raises(ScreenNotFoundError) as exc_info:
            delete_screen(sample_doc, "hal")

        assert exc_info.value.suggestions() == ["hall"]


class TestRenameScreen:
    """Test rename_screen."""

    def test_keeps_position(self, rich_doc: dict[str, Any]) -> None:
        """The renamed screen stays where it was in iteration order."""
        doc, selected = rename_screen(rich_doc, "hall", "corridor")

        assert selected == "corridor"
        assert list(doc) == ["start", "corridor", "tower"]
        assert doc["corridor"]["background"] == "hall.png"

    def test_retargets_all_references(self, rich_doc: dict[str, Any]) -> None:
        """Triggers, options and progressive messages follow the rename."""
        rich_doc = copy.deepcopy(rich_doc)
        messages = rich_doc["start"]["triggers"]["inspect"]["options"][0]["additional_message"]
        messages["2"]["next_screen"] = "hall"

        doc, _ = rename_screen(rich_doc, "hall", "corridor")

        start = doc["start"]
        assert start["triggers"]["right"]["next_screen"] == "corridor"
        option = start["triggers"]["inspect"]["options"][0]
        assert option["next_screen"] == "corridor"
        assert option["additional_message"]["2"]["next_screen"] == "corridor"
        assert start["triggers"]["up"]["next_screen"] == "tower"

    def test_self_reference_retargeted(self, sample_doc: dict[str, Any]) -> None:
        """A screen that links to itself links to its new ID."""
        sample_doc["hall"]["triggers"]["down"] = {"message": "", "next_screen": "hall"}

        doc, _ = rename_screen(sample_doc, "hall", "corridor")

        assert doc["corridor"]["triggers"]["down"]["next_screen"] == "corridor"

    def test_without_retarget(self, rich_doc: dict[str, Any]) -> None:
        """References are left alone when retargeting is off."""
        doc, _ = rename_screen(rich_doc, "hall", "corridor", retarget=False)

        assert doc["start"]["triggers"]["right"]["next_screen"] == "hall"
        assert doc["start"] is rich_doc["start"]

    def test_input_unchanged(self, rich_doc: dict[str, Any]) -> None:
        """Renaming never edits the input document."""
        before = copy.deepcopy(rich_doc)

        rename_screen(rich_doc, "hall", "corridor")

        assert rich_doc == before

    def test_duplicate_target_rejected(self, rich_doc: dict[str, Any]) -> None:
        """The new ID must be free."""
        with pytest.raises(DuplicateIdentifierError):
            rename_screen(rich_doc, "hall", "tower")

    def test_same_id_is_noop(self, sample_doc: dict[str, Any]) -> None:
        """Renaming to the same ID returns an equal document."""
        doc, selected = rename_screen(sample_doc, "hall", "hall")

        assert doc == sample_doc
        assert selected == "hall"


class TestIterNextScreenRefs:
    """Test iter_next_screen_refs."""

    def test_yields_every_reference(self, rich_doc: dict[str, Any]) -> None:
        """Trigger and option targets are reported with their paths."""
        refs = dict(iter_next_screen_refs(rich_doc["start"]))

        assert refs == {
            ("triggers", "right", "next_screen"): "hall",
            ("triggers", "up", "next_screen"): "tower",
            ("triggers", "inspect", "options", 0, "next_screen"): "hall",
        }

    def test_screen_without_triggers(self) -> None:
        """Screens with no triggers have no references."""
        assert list(iter_next_screen_refs({"background": ""})) == []


class TestScreenFields:
    """Test set_background and set_key_item_unlocks."""

    def test_set_background(self, sample_doc: dict[str, Any]) -> None:
        """Background is replaced; triggers are shared."""
        doc = set_background(sample_doc, "start", "night.png")

        assert doc["start"]["background"] == "night.png"
        assert doc["start"]["triggers"] is sample_doc["start"]["triggers"]

    def test_set_background_type_checked(self, sample_doc: dict[str, Any]) -> None:
        """Background must be a string."""
        with pytest.raises(DocumentValidationError):
            set_background(sample_doc, "start", ["a.png"])

    def test_set_key_item_unlocks(self, sample_doc: dict[str, Any]) -> None:
        """Unlock lists are created under the direction."""
        doc = set_key_item_unlocks(sample_doc, "start", "up", ["brass_key", "lamp"])

        assert doc["start"]["key_item_unlocks"] == {"up": ["brass_key", "lamp"]}

    def test_empty_unlock_list_removes_entry(self, rich_doc: dict[str, Any]) -> None:
        """An empty list clears the requirement."""
        doc = set_key_item_unlocks(rich_doc, "start", "up", [])

        assert doc["start"]["key_item_unlocks"] == {}

    @pytest.mark.parametrize("items", ["brass_key", [""], [1]])
    def test_bad_unlock_items_rejected(self, sample_doc: dict[str, Any], items: Any) -> None:
        """Items must be a list of non-empty IDs."""
        with pytest.raises(DocumentValidationError):
            set_key_item_unlocks(sample_doc, "start", "up", items)
