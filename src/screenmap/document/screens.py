"""Screen lifecycle and screen-level field edits.

Creating and deleting screens enforces the document invariants: screen IDs
are unique non-empty strings, and a document always keeps at least one
screen. Deleting a screen removes only its own entry; ``next_screen``
references to it elsewhere are left dangling (see
:func:`screenmap.document.validation.check_document`).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, NamedTuple

from screenmap.document.errors import (
    DocumentValidationError,
    DuplicateIdentifierError,
    InvalidIdentifierError,
    LastScreenRemainingError,
)
from screenmap.document.fields import coerce_field
from screenmap.document.mutations import delete_path, require_screen, set_path
from screenmap.document.paths import BackgroundPath, KeyItemUnlockPath
from screenmap.models import Screen
from screenmap.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from screenmap.document.mutations import Document

log = get_logger(__name__)


class ScreenCreated(NamedTuple):
    """Result of creating a screen; ``screen_id`` is the suggested selection."""

    document: Document
    screen_id: str


class ScreenDeleted(NamedTuple):
    """Result of deleting a screen.

    ``fallback`` is the first remaining screen ID, for hosts whose current
    selection was the deleted screen.
    """

    document: Document
    remaining: list[str]
    fallback: str


def default_screen() -> dict[str, Any]:
    """Return the value stored for a newly created screen."""
    return {"background": "", "key_item_unlocks": {}, "triggers": {}}


def _check_identifier(screen_id: Any) -> str:
    if not isinstance(screen_id, str) or not screen_id.strip():
        raise InvalidIdentifierError(screen_id)
    return screen_id


def create_screen(doc: Mapping[str, Any], screen_id: str) -> ScreenCreated:
    """Insert a default screen under *screen_id*.

    Raises:
        InvalidIdentifierError: If *screen_id* is empty or not a string.
        DuplicateIdentifierError: If the ID is already used.
    """
    _check_identifier(screen_id)
    if screen_id in doc:
        raise DuplicateIdentifierError(screen_id)

    new_doc = dict(doc)
    new_doc[screen_id] = default_screen()
    log.info("screen_created", screen_id=screen_id, screens=len(new_doc))
    return ScreenCreated(new_doc, screen_id)


def delete_screen(doc: Mapping[str, Any], screen_id: str) -> ScreenDeleted:
    """Remove a screen from the document.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        LastScreenRemainingError: If it is the only screen.
    """
    require_screen(doc, screen_id, context="delete_screen")
    if len(doc) == 1:
        raise LastScreenRemainingError(screen_id)

    new_doc = {key: value for key, value in doc.items() if key != screen_id}
    remaining = list(new_doc)
    log.info("screen_deleted", screen_id=screen_id, screens=len(new_doc))
    return ScreenDeleted(new_doc, remaining, remaining[0])


def iter_next_screen_refs(
    screen: Mapping[str, Any],
) -> Iterator[tuple[tuple[str | int, ...], Any]]:
    """Yield ``(path, target)`` for every ``next_screen`` field in a screen."""
    triggers = screen.get("triggers")
    if not isinstance(triggers, Mapping):
        return
    for direction, trigger in triggers.items():
        if not isinstance(trigger, Mapping):
            continue
        if "next_screen" in trigger:
            yield ("triggers", direction, "next_screen"), trigger["next_screen"]
        options = trigger.get("options")
        if not isinstance(options, list):
            continue
        for index, option in enumerate(options):
            if not isinstance(option, Mapping):
                continue
            base = ("triggers", direction, "options", index)
            if "next_screen" in option:
                yield (*base, "next_screen"), option["next_screen"]
            messages = option.get("additional_message")
            if not isinstance(messages, Mapping):
                continue
            for key, message in messages.items():
                if isinstance(message, Mapping) and "next_screen" in message:
                    yield (*base, "additional_message", key, "next_screen"), message["next_screen"]


def rename_screen(
    doc: Mapping[str, Any],
    old_id: str,
    new_id: str,
    *,
    retarget: bool = True,
) -> ScreenCreated:
    """Give a screen a new ID, keeping its place in iteration order.

    Args:
        doc: Document snapshot.
        old_id: Existing screen ID.
        new_id: Replacement ID.
        retarget: Rewrite every ``next_screen`` that named *old_id*.

    Returns:
        ScreenCreated with the new document and *new_id*.

    Raises:
        ScreenNotFoundError: If *old_id* does not exist.
        InvalidIdentifierError: If *new_id* is empty.
        DuplicateIdentifierError: If *new_id* is already used.
    """
    require_screen(doc, old_id, context="rename_screen")
    _check_identifier(new_id)
    if new_id == old_id:
        return ScreenCreated(dict(doc), new_id)
    if new_id in doc:
        raise DuplicateIdentifierError(new_id)

    new_doc: Document = {(new_id if key == old_id else key): value for key, value in doc.items()}

    retargeted = 0
    if retarget:
        for screen_id in list(new_doc):
            for path, target in list(iter_next_screen_refs(new_doc[screen_id])):
                if target == old_id:
                    new_doc = set_path(new_doc, screen_id, path, new_id)
                    retargeted += 1

    log.info("screen_renamed", old_id=old_id, new_id=new_id, retargeted=retargeted)
    return ScreenCreated(new_doc, new_id)


def set_background(doc: Mapping[str, Any], screen_id: str, background: str) -> Document:
    """Set a screen's background image reference.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        DocumentValidationError: If *background* is not a string.
    """
    require_screen(doc, screen_id, context="set_background")
    stored = coerce_field(Screen, "background", background)
    return set_path(doc, screen_id, BackgroundPath(), stored)


def set_key_item_unlocks(
    doc: Mapping[str, Any],
    screen_id: str,
    direction: str,
    items: list[str],
) -> Document:
    """Set the items required to traverse *direction*.

    An empty list removes the direction's entry.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        DocumentValidationError: If *items* is not a list of non-empty strings.
    """
    require_screen(doc, screen_id, context="set_key_item_unlocks")
    if not isinstance(items, list) or not all(isinstance(i, str) and i for i in items):
        raise DocumentValidationError(
            [f"key_item_unlocks.{direction}: expected a list of item IDs, got {items!r}"],
            source=screen_id,
        )

    path = KeyItemUnlockPath(direction)
    if not items:
        return delete_path(doc, screen_id, path)
    return set_path(doc, screen_id, path, list(items))
