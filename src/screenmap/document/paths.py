"""Typed paths into a screen.

A path is an ordered list of segments walked from a screen's dict. String
segments address map keys; integer segments address list positions (only
``options`` is a list in the document schema).

The tagged path types below cover every known field so editors never have
to spell out raw segment lists. Raw sequences are still accepted by the
mutation functions for generic use.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeAlias

from screenmap.models import INSPECT

Segment: TypeAlias = str | int


@dataclass(frozen=True)
class BackgroundPath:
    """The screen's background image reference."""

    @property
    def segments(self) -> tuple[Segment, ...]:
        return ("background",)


@dataclass(frozen=True)
class KeyItemUnlockPath:
    """Items required to traverse one direction."""

    direction: str

    @property
    def segments(self) -> tuple[Segment, ...]:
        return ("key_item_unlocks", self.direction)


@dataclass(frozen=True)
class TriggerPath:
    """A trigger, or one field of it when ``field`` is set."""

    direction: str
    field: str | None = None

    @property
    def segments(self) -> tuple[Segment, ...]:
        base: tuple[Segment, ...] = ("triggers", self.direction)
        return base if self.field is None else (*base, self.field)


@dataclass(frozen=True)
class OptionPath:
    """An inspect option by position, or one field of it."""

    index: int
    field: str | None = None

    @property
    def segments(self) -> tuple[Segment, ...]:
        base: tuple[Segment, ...] = ("triggers", INSPECT, "options", self.index)
        return base if self.field is None else (*base, self.field)


@dataclass(frozen=True)
class AdditionalMessagePath:
    """A progressive message of an inspect option, or one field of it.

    Ordinals are stored as string keys in the document.
    """

    option_index: int
    ordinal: int
    field: str | None = None

    @property
    def segments(self) -> tuple[Segment, ...]:
        base = (
            *OptionPath(self.option_index).segments,
            "additional_message",
            str(self.ordinal),
        )
        return base if self.field is None else (*base, self.field)


FieldPath: TypeAlias = (
    BackgroundPath | KeyItemUnlockPath | TriggerPath | OptionPath | AdditionalMessagePath
)
PathLike: TypeAlias = FieldPath | Sequence[Segment]

_PATH_TYPES = (BackgroundPath, KeyItemUnlockPath, TriggerPath, OptionPath, AdditionalMessagePath)


def to_segments(path: PathLike) -> tuple[Segment, ...]:
    """Normalize a typed or raw path to a tuple of segments.

    Raises:
        ValueError: If the path is empty.
    """
    if isinstance(path, str):
        # A bare string would otherwise be split into characters.
        segments: tuple[Segment, ...] = (path,)
    elif isinstance(path, _PATH_TYPES):
        segments = path.segments
    else:
        segments = tuple(path)
    if not segments:
        raise ValueError("path must have at least one segment")
    return segments


def format_path(screen_id: str, path: PathLike) -> str:
    """Render a path in dotted form for logs and messages."""
    return ".".join([screen_id, *(str(s) for s in to_segments(path))])
