"""Trigger, inspect option and progressive message edits.

All operations take a document snapshot and return a new one; inputs are
never modified. Every address (screen, direction, option index, message
ordinal) is checked before the first mutation, so a rejected call leaves
nothing half-applied.

Options are addressed by position. Deleting an option shifts the ones after
it down, so positions held across edits go stale; each option also carries a
generated ``id`` that :func:`find_option_index` resolves to its current
position.

Progressive messages are addressed by ordinal, not position. Ordinal 1 is
the option's own ``message``; added messages start at 2.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, NamedTuple

from screenmap.document.errors import (
    DirectionExistsError,
    DirectionNotFoundError,
    DocumentValidationError,
    IndexOutOfRangeError,
    UnknownFieldError,
)
from screenmap.document.fields import coerce_field, field_names
from screenmap.document.mutations import delete_path, get_path, require_screen, set_path
from screenmap.document.paths import OptionPath, TriggerPath
from screenmap.models import INSPECT, AdditionalMessage, Option, Trigger
from screenmap.observability.logging import get_logger

if TYPE_CHECKING:
    from screenmap.document.mutations import Document

log = get_logger(__name__)

_FIRST_ADDITIONAL_ORDINAL = 2
_OPTION_EDITABLE = [name for name in field_names(Option) if name != "id"]


class OptionAdded(NamedTuple):
    """Result of adding an inspect option."""

    document: Document
    index: int
    option_id: str


class MessageAdded(NamedTuple):
    """Result of adding a progressive message."""

    document: Document
    ordinal: int


def new_option_id() -> str:
    """Generate a stable identifier for a new option."""
    return uuid.uuid4().hex[:12]


# ---------------------------------------------------------------------------
# Address checks
# ---------------------------------------------------------------------------


def _check_direction_name(direction: str) -> None:
    if not isinstance(direction, str) or not direction:
        raise DocumentValidationError(
            [f"direction: must be a non-empty string, got {direction!r}"]
        )


def _triggers(doc: Mapping[str, Any], screen_id: str, context: str) -> Mapping[str, Any]:
    screen = require_screen(doc, screen_id, context=context)
    triggers = screen.get("triggers") if isinstance(screen, Mapping) else None
    return triggers if isinstance(triggers, Mapping) else {}


def _require_trigger(
    doc: Mapping[str, Any], screen_id: str, direction: str, context: str
) -> Mapping[str, Any]:
    triggers = _triggers(doc, screen_id, context)
    trigger = triggers.get(direction)
    if not isinstance(trigger, Mapping):
        raise DirectionNotFoundError(screen_id, direction, available=list(triggers))
    return trigger


def _options(doc: Mapping[str, Any], screen_id: str) -> list[Any]:
    options = get_path(doc, screen_id, TriggerPath(INSPECT, "options"), default=[])
    if not isinstance(options, list):
        raise DocumentValidationError(
            [f"triggers.{INSPECT}.options: expected a list, got {type(options).__name__}"],
            source=screen_id,
        )
    return options


def _require_option(
    doc: Mapping[str, Any], screen_id: str, index: int, context: str
) -> Mapping[str, Any]:
    require_screen(doc, screen_id, context=context)
    options = _options(doc, screen_id)
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(options):
        raise IndexOutOfRangeError(
            "option", index, valid=list(range(len(options))), screen_id=screen_id
        )
    option = options[index]
    return option if isinstance(option, Mapping) else {}


def _message_keys(option: Mapping[str, Any], screen_id: str) -> dict[int, str]:
    """Map numeric ordinal to the stored key for an option's messages.

    Raises:
        DocumentValidationError: If two keys spell the same ordinal ("2", "02").
    """
    messages = option.get("additional_message")
    if not isinstance(messages, Mapping):
        return {}
    keys: dict[int, str] = {}
    for key in messages:
        text = str(key)
        if not (text.isascii() and text.isdigit()):
            continue
        number = int(text)
        if number in keys:
            clash = f"keys '{keys[number]}' and '{key}' are both ordinal {number}"
            raise DocumentValidationError([f"additional_message: {clash}"], source=screen_id)
        keys[number] = key
    return keys


def _require_message_key(
    option: Mapping[str, Any], screen_id: str, ordinal: int | str
) -> str:
    keys = _message_keys(option, screen_id)
    try:
        number = int(ordinal)
    except (TypeError, ValueError):
        number = -1
    if isinstance(ordinal, bool) or number not in keys:
        raise IndexOutOfRangeError(
            "additional_message", ordinal, valid=sorted(keys), screen_id=screen_id
        )
    return keys[number]


def _message_path(index: int, key: str, *rest: str) -> tuple[str | int, ...]:
    return (*OptionPath(index, "additional_message").segments, key, *rest)


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------


def add_trigger(doc: Mapping[str, Any], screen_id: str, direction: str) -> Document:
    """Install an empty trigger for *direction* on a screen.

    The new trigger is ``{"message": "", "next_screen": ""}``.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        DirectionExistsError: If the direction already has a trigger.
    """
    _check_direction_name(direction)
    triggers = _triggers(doc, screen_id, context="add_trigger")
    if direction in triggers:
        raise DirectionExistsError(screen_id, direction)

    new_doc = set_path(doc, screen_id, TriggerPath(direction), {"message": "", "next_screen": ""})
    log.debug("trigger_added", screen_id=screen_id, direction=direction)
    return new_doc


def delete_trigger(doc: Mapping[str, Any], screen_id: str, direction: str) -> Document:
    """Remove the trigger for *direction*.

    References to this screen elsewhere in the document are left untouched.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        DirectionNotFoundError: If the direction has no trigger.
    """
    _require_trigger(doc, screen_id, direction, context="delete_trigger")
    new_doc = delete_path(doc, screen_id, TriggerPath(direction))
    log.debug("trigger_deleted", screen_id=screen_id, direction=direction)
    return new_doc


def update_trigger(
    doc: Mapping[str, Any],
    screen_id: str,
    direction: str,
    field_name: str,
    value: Any,
) -> Document:
    """Set one trigger field. ``None`` removes an optional field.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        DirectionNotFoundError: If the direction has no trigger.
        UnknownFieldError: If Trigger has no such field.
        DocumentValidationError: If the value does not fit the field.
    """
    _require_trigger(doc, screen_id, direction, context="update_trigger")
    stored = coerce_field(Trigger, field_name, value)
    path = TriggerPath(direction, field_name)
    if stored is None:
        new_doc = delete_path(doc, screen_id, path)
    else:
        new_doc = set_path(doc, screen_id, path, stored)
    log.debug("trigger_updated", screen_id=screen_id, direction=direction, field=field_name)
    return new_doc


# ---------------------------------------------------------------------------
# Inspect options
# ---------------------------------------------------------------------------


def add_inspect_option(
    doc: Mapping[str, Any],
    screen_id: str,
    *,
    option_id: str | None = None,
    **fields: Any,
) -> OptionAdded:
    """Append a new option to the screen's ``inspect`` trigger.

    Creates ``{"message": "", "options": []}`` for ``inspect`` first when the
    screen has no inspect trigger. The new option starts as
    ``{"id": ..., "label": "", "message": ""}`` merged with *fields*.

    Args:
        doc: Document snapshot.
        screen_id: Screen to edit.
        option_id: Identifier to assign; generated when omitted.
        **fields: Initial Option fields.

    Returns:
        OptionAdded with the new document, the option's index and its ID.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        UnknownFieldError: If a field name is not an Option field.
        DocumentValidationError: If a field value does not fit.
    """
    triggers = _triggers(doc, screen_id, context="add_inspect_option")

    option: dict[str, Any] = {"id": option_id or new_option_id(), "label": "", "message": ""}
    for name, value in fields.items():
        if name == "id":
            raise UnknownFieldError("Option", name, allowed=_OPTION_EDITABLE)
        stored = coerce_field(Option, name, value)
        if stored is None or (name == "additional_message" and not stored):
            option.pop(name, None)
        else:
            option[name] = stored

    if INSPECT not in triggers:
        doc = set_path(doc, screen_id, TriggerPath(INSPECT), {"message": "", "options": []})
    options = _options(doc, screen_id)

    new_doc = set_path(doc, screen_id, TriggerPath(INSPECT, "options"), [*options, option])
    index = len(options)
    log.debug("option_added", screen_id=screen_id, index=index, option_id=option["id"])
    return OptionAdded(new_doc, index, option["id"])


def update_inspect_option(
    doc: Mapping[str, Any],
    screen_id: str,
    index: int,
    field_name: str,
    value: Any,
) -> Document:
    """Merge ``{field_name: value}`` into the option at *index*.

    ``None`` removes an optional field; an empty ``additional_message`` is
    treated the same way.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        IndexOutOfRangeError: If *index* does not address an option.
        UnknownFieldError: If Option has no such editable field.
        DocumentValidationError: If the value does not fit the field.
    """
    _require_option(doc, screen_id, index, context="update_inspect_option")
    if field_name not in _OPTION_EDITABLE:
        raise UnknownFieldError("Option", field_name, allowed=_OPTION_EDITABLE)

    stored = coerce_field(Option, field_name, value)
    path = OptionPath(index, field_name)
    if stored is None or (field_name == "additional_message" and not stored):
        new_doc = delete_path(doc, screen_id, path)
    else:
        new_doc = set_path(doc, screen_id, path, stored)
    log.debug("option_updated", screen_id=screen_id, index=index, field=field_name)
    return new_doc


def delete_inspect_option(doc: Mapping[str, Any], screen_id: str, index: int) -> Document:
    """Remove the option at *index*; later options shift down by one.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        IndexOutOfRangeError: If *index* does not address an option.
    """
    _require_option(doc, screen_id, index, context="delete_inspect_option")
    new_doc = delete_path(doc, screen_id, OptionPath(index))
    log.debug("option_deleted", screen_id=screen_id, index=index)
    return new_doc


def find_option_index(doc: Mapping[str, Any], screen_id: str, option_id: str) -> int:
    """Resolve an option's stable ID to its current position.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        IndexOutOfRangeError: If no option carries *option_id*.
    """
    require_screen(doc, screen_id, context="find_option_index")
    options = _options(doc, screen_id)
    for index, option in enumerate(options):
        if isinstance(option, Mapping) and option.get("id") == option_id:
            return index
    known = [o.get("id") for o in options if isinstance(o, Mapping) and o.get("id")]
    raise IndexOutOfRangeError("option id", option_id, valid=known, screen_id=screen_id)


# ---------------------------------------------------------------------------
# Progressive (additional) messages
# ---------------------------------------------------------------------------


def add_additional_message(
    doc: Mapping[str, Any],
    screen_id: str,
    index: int,
    message: str = "",
) -> MessageAdded:
    """Add a progressive message to the option at *index*.

    The new ordinal is one more than the highest existing ordinal, and never
    less than 2.

    Returns:
        MessageAdded with the new document and the assigned ordinal.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        IndexOutOfRangeError: If *index* does not address an option.
    """
    option = _require_option(doc, screen_id, index, context="add_additional_message")
    stored = coerce_field(AdditionalMessage, "message", message)

    ordinal = max([_FIRST_ADDITIONAL_ORDINAL - 1, *_message_keys(option, screen_id)]) + 1
    new_doc = set_path(doc, screen_id, _message_path(index, str(ordinal)), {"message": stored})
    log.debug("additional_message_added", screen_id=screen_id, index=index, ordinal=ordinal)
    return MessageAdded(new_doc, ordinal)


def update_additional_message(
    doc: Mapping[str, Any],
    screen_id: str,
    index: int,
    ordinal: int | str,
    field_name: str,
    value: Any,
) -> Document:
    """Set one field of a progressive message. ``None`` removes an optional field.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        IndexOutOfRangeError: If the option or ordinal does not exist.
        UnknownFieldError: If AdditionalMessage has no such field.
        DocumentValidationError: If the value does not fit the field.
    """
    option = _require_option(doc, screen_id, index, context="update_additional_message")
    key = _require_message_key(option, screen_id, ordinal)
    stored = coerce_field(AdditionalMessage, field_name, value)

    path = _message_path(index, key, field_name)
    if stored is None:
        new_doc = delete_path(doc, screen_id, path)
    else:
        new_doc = set_path(doc, screen_id, path, stored)
    log.debug(
        "additional_message_updated",
        screen_id=screen_id,
        index=index,
        ordinal=int(key),
        field=field_name,
    )
    return new_doc


def delete_additional_message(
    doc: Mapping[str, Any],
    screen_id: str,
    index: int,
    ordinal: int | str,
) -> Document:
    """Remove one progressive message.

    Removing the last one removes the ``additional_message`` field itself,
    so a present field always holds at least one message.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        IndexOutOfRangeError: If the option or ordinal does not exist.
    """
    option = _require_option(doc, screen_id, index, context="delete_additional_message")
    key = _require_message_key(option, screen_id, ordinal)

    if len(option["additional_message"]) == 1:
        new_doc = delete_path(doc, screen_id, OptionPath(index, "additional_message"))
    else:
        new_doc = delete_path(doc, screen_id, _message_path(index, key))
    log.debug("additional_message_deleted", screen_id=screen_id, index=index, ordinal=int(key))
    return new_doc
