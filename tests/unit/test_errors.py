"""Tests for document error feedback."""

from __future__ import annotations

import pytest

from screenmap.document.errors import (
    DirectionExistsError,
    DirectionNotFoundError,
    DocumentError,
    DocumentValidationError,
    DuplicateIdentifierError,
    IndexOutOfRangeError,
    InvalidIdentifierError,
    LastScreenRemainingError,
    ScreenNotFoundError,
    UnknownFieldError,
)


class TestScreenNotFoundError:
    """Test ScreenNotFoundError."""

    def test_message_includes_context(self) -> None:
        """str() names the screen and the operation."""
        err = ScreenNotFoundError("vault", available=["start"], context="set_path")

        assert str(err) == "Screen 'vault' not found (set_path)"

    def test_feedback_suggests_similar_ids(self) -> None:
        """Close matches are offered."""
        err = ScreenNotFoundError("strat", available=["start", "hall"])

        feedback = err.to_feedback()

        assert "Did you mean" in feedback
        assert "`start`" in feedback
        assert "`hall`" in feedback

    def test_long_lists_truncated(self) -> None:
        """Only the first screens are listed."""
        err = ScreenNotFoundError("x", available=[f"screen_{i:02}" for i in range(25)])

        assert "... and 5 more" in err.to_feedback()


class TestOtherErrors:
    """Test the remaining error types."""

    @pytest.mark.parametrize(
        ("err", "heading"),
        [
            (InvalidIdentifierError(""), "Invalid Screen ID"),
            (DuplicateIdentifierError("hall"), "Screen Already Exists"),
            (LastScreenRemainingError("start"), "Last Screen Remaining"),
            (DirectionExistsError("start", "up"), "Trigger Already Exists"),
            (DirectionNotFoundError("start", "up"), "Trigger Not Found"),
            (IndexOutOfRangeError("option", 3, valid=[0, 1]), "Option Not Found"),
            (UnknownFieldError("Trigger", "x", allowed=["message"]), "Unknown Trigger Field"),
            (DocumentValidationError(["a: bad"]), "Invalid Document"),
        ],
    )
    def test_feedback_heading(self, err: DocumentError, heading: str) -> None:
        """Every error formats as a markdown heading."""
        assert err.to_feedback().startswith(f"## Error: {heading}")
        assert isinstance(err, Exception)

    def test_index_error_without_valid_values(self) -> None:
        """An empty collection is explained."""
        err = IndexOutOfRangeError("additional_message", 2, screen_id="start")

        assert "There is no additional_message" in err.to_feedback()
        assert str(err) == "No additional_message at 2 on screen 'start'"

    def test_unknown_field_suggests(self) -> None:
        """Typos get a suggestion."""
        err = UnknownFieldError("Option", "lable", allowed=["label", "message"])

        assert "**Did you mean**: `label`" in err.to_feedback()

    def test_validation_error_message(self) -> None:
        """The message counts errors and names the source."""
        err = DocumentValidationError(["a: bad", "b: worse"], source="map.json")

        assert str(err) == "Document validation failed (map.json): 2 error(s)"
        assert "  - b: worse" in err.to_feedback()

    def test_base_feedback_not_implemented(self) -> None:
        """The base class has no feedback of its own."""
        with pytest.raises(NotImplementedError):
            DocumentError("x").to_feedback()
