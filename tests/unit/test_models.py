"""Tests for the document models and field coercion."""

from __future__ import annotations

import tomllib
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from screenmap import __version__
from screenmap.document.errors import DocumentValidationError, UnknownFieldError
from screenmap.document.fields import coerce_field, field_names
from screenmap.models import DIRECTIONS, INSPECT, Option, Screen, ScreenDocument, Trigger

if TYPE_CHECKING:
    from pathlib import Path


class TestModels:
    """Test model validation."""

    def test_directions(self) -> None:
        """The conventional directions include inspect."""
        assert DIRECTIONS == ("up", "down", "left", "right", INSPECT)

    def test_screen_defaults(self) -> None:
        """Screens default to empty fields."""
        screen = Screen()

        assert screen.background == ""
        assert screen.key_item_unlocks == {}
        assert screen.triggers == {}

    def test_string_ordinals_parsed(self) -> None:
        """JSON string keys become integer ordinals."""
        option = Option.model_validate(
            {"label": "", "message": "", "additional_message": {"3": {"message": "c"}}}
        )

        assert option.additional_message is not None
        assert list(option.additional_message) == [3]

    def test_non_positive_ordinal_rejected(self) -> None:
        """Ordinals start at 1."""
        with pytest.raises(ValidationError):
            Option.model_validate(
                {"label": "", "message": "", "additional_message": {"0": {"message": ""}}}
            )

    def test_colliding_ordinals_rejected(self) -> None:
        """'2' and '02' cannot both be stored."""
        messages = {"2": {"message": "a"}, "02": {"message": "b"}}

        with pytest.raises(ValidationError, match="both ordinal 2"):
            Option.model_validate({"label": "", "message": "", "additional_message": messages})

    def test_trigger_requires_message(self) -> None:
        """message is the only required trigger field."""
        with pytest.raises(ValidationError):
            Trigger.model_validate({"next_screen": "hall"})

    def test_document_requires_screen(self) -> None:
        """An empty document is invalid."""
        with pytest.raises(ValidationError):
            ScreenDocument.model_validate({})

    def test_empty_screen_id_rejected(self) -> None:
        """Screen IDs are non-empty."""
        with pytest.raises(ValidationError):
            ScreenDocument.model_validate({"": {}})


class TestCoerceField:
    """Test coerce_field."""

    def test_returns_json_form(self) -> None:
        """Nested models are dumped without absent fields."""
        value = coerce_field(Option, "additional_message", {2: {"message": "b"}})

        assert value == {"2": {"message": "b"}}

    def test_none_for_optional(self) -> None:
        """None is allowed for optional fields."""
        assert coerce_field(Trigger, "next_screen", None) is None

    def test_constraint_violation(self) -> None:
        """Field constraints apply."""
        with pytest.raises(DocumentValidationError) as exc_info:
            coerce_field(Option, "tp_cost", -3)

        assert exc_info.value.source == "Option.tp_cost"

    def test_unknown_field(self) -> None:
        """Unknown names list the allowed ones."""
        with pytest.raises(UnknownFieldError) as exc_info:
            coerce_field(Screen, "music", "x")

        assert exc_info.value.allowed == field_names(Screen)


def test_version_matches_pyproject(project_root: Path) -> None:
    """The package version matches the packaging metadata."""
    with (project_root / "pyproject.toml").open("rb") as f:
        data = tomllib.load(f)

    assert data["project"]["version"] == __version__
