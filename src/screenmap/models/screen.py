"""Pydantic models for the screen map document.

These models describe the interchange JSON shape: a mapping of screen IDs to
screens, each with directional triggers. They are typed views used for
validation on load and for field-level edit checks. The canonical document
snapshot stays a plain dict so edits can share untouched subtrees.

Optional fields default to ``None``, which means "absent from the JSON".
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    StringConstraints,
    field_validator,
)

INSPECT = "inspect"
MOVEMENT_DIRECTIONS = ("up", "down", "left", "right")
DIRECTIONS = (*MOVEMENT_DIRECTIONS, INSPECT)

ItemType = Literal["key", "item", "tool"]
ScreenId = Annotated[str, StringConstraints(min_length=1)]


class _DocumentModel(BaseModel):
    """Base for document records; unknown keys are tolerated and preserved."""

    model_config = ConfigDict(extra="allow")


class GrantedItem(_DocumentModel):
    """Item awarded to the player when an option is chosen."""

    id: str = Field(min_length=1, description="Item identifier")
    type: ItemType = Field(description="Item category: key, item or tool")


class AdditionalMessage(_DocumentModel):
    """Follow-up message shown on a later interaction with the same option."""

    message: str = Field(description="Message text")
    tp_cost: int | None = Field(default=None, ge=0, description="Time-point cost")
    next_screen: str | None = Field(default=None, description="Navigation target")


class Option(_DocumentModel):
    """One selectable branch under an ``inspect`` trigger."""

    id: str | None = Field(default=None, description="Stable generated identifier")
    label: str = Field(description="Text shown in the option list")
    message: str = Field(description="Message shown when the option is chosen")
    tp_cost: int | None = Field(default=None, ge=0, description="Time-point cost")
    next_screen: str | None = Field(default=None, description="Navigation target")
    once: bool | None = Field(default=None, description="Option disappears after use")
    grants_item: GrantedItem | None = Field(default=None, description="Item awarded")
    additional_message: dict[int, AdditionalMessage] | None = Field(
        default=None,
        description="Progressive messages keyed by positive ordinal",
    )
    unlocks_direction: str | None = Field(
        default=None, description="Direction made available by this option"
    )

    @field_validator("additional_message", mode="before")
    @classmethod
    def _reject_colliding_keys(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        seen: dict[int, Any] = {}
        for key in value:
            text = str(key)
            if not (text.isascii() and text.isdigit()):
                continue
            number = int(text)
            if number in seen:
                raise ValueError(f"keys {seen[number]!r} and {key!r} are both ordinal {number}")
            seen[number] = key
        return value

    @field_validator("additional_message")
    @classmethod
    def _check_ordinals(
        cls, value: dict[int, AdditionalMessage] | None
    ) -> dict[int, AdditionalMessage] | None:
        if value is None:
            return value
        if not value:
            raise ValueError("additional_message must be absent rather than empty")
        bad = sorted(k for k in value if k < 1)
        if bad:
            raise ValueError(f"additional_message ordinals must be positive, got {bad}")
        return value

    def ordered_messages(self) -> list[tuple[int, AdditionalMessage]]:
        """Return progressive messages in ascending ordinal order."""
        if not self.additional_message:
            return []
        return sorted(self.additional_message.items())


class Trigger(_DocumentModel):
    """Effect attached to a direction on a screen."""

    message: str = Field(description="Message shown when the trigger fires")
    next_screen: str | None = Field(default=None, description="Navigation target")
    hidden: bool | None = Field(default=None, description="Hide from direction list")
    options: list[Option] | None = Field(
        default=None, description="Inspect branches (meaningful for inspect only)"
    )


class Screen(_DocumentModel):
    """A location in the game map."""

    background: str = Field(default="", description="Background image reference")
    key_item_unlocks: dict[str, list[str]] = Field(
        default_factory=dict, description="Item IDs required per direction"
    )
    triggers: dict[str, Trigger] = Field(
        default_factory=dict, description="Triggers keyed by direction"
    )


class ScreenDocument(RootModel[dict[ScreenId, Screen]]):
    """Whole document: screen ID to screen, at least one entry."""

    @field_validator("root")
    @classmethod
    def _require_screen(cls, value: dict[str, Screen]) -> dict[str, Screen]:
        if not value:
            raise ValueError("document must contain at least one screen")
        return value
