"""Pydantic models for the screen map document.

The document maps screen IDs to screens. Each screen carries triggers keyed
by direction; the ``inspect`` trigger may hold a list of options, and each
option may hold progressive (additional) messages keyed by ordinal.
"""

from screenmap.models.screen import (
    DIRECTIONS,
    INSPECT,
    MOVEMENT_DIRECTIONS,
    AdditionalMessage,
    GrantedItem,
    ItemType,
    Option,
    Screen,
    ScreenDocument,
    Trigger,
)

__all__ = [
    "DIRECTIONS",
    "INSPECT",
    "MOVEMENT_DIRECTIONS",
    "AdditionalMessage",
    "GrantedItem",
    "ItemType",
    "Option",
    "Screen",
    "ScreenDocument",
    "Trigger",
]
