"""Immutable path mutation over the screen document.

Every edit produces a new document. Only the containers on the path from the
document root to the edited key are copied; every sibling subtree is shared
with the input, so a host can detect "this branch changed" with ``is``.

Intermediate maps that do not exist yet are created on the way down. This
lets editor forms fill in deep optional fields one at a time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeAlias

from screenmap.document.errors import IndexOutOfRangeError, ScreenNotFoundError
from screenmap.document.paths import format_path, to_segments
from screenmap.observability.logging import get_logger

if TYPE_CHECKING:
    from screenmap.document.paths import PathLike, Segment

log = get_logger(__name__)

Document: TypeAlias = dict[str, Any]

_MISSING = object()


def require_screen(doc: Mapping[str, Any], screen_id: str, context: str = "") -> Any:
    """Return the screen dict for *screen_id* or raise.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
    """
    screen = doc.get(screen_id, _MISSING) if isinstance(screen_id, str) else _MISSING
    if screen is _MISSING:
        raise ScreenNotFoundError(str(screen_id), available=list(doc), context=context)
    return screen


def _list_index(items: list[Any], segment: Segment) -> int:
    if isinstance(segment, int) and not isinstance(segment, bool):
        index = segment
    elif isinstance(segment, str) and segment.isdigit():
        index = int(segment)
    else:
        raise IndexOutOfRangeError("list position", segment, valid=list(range(len(items))))
    if not 0 <= index < len(items):
        raise IndexOutOfRangeError("list position", segment, valid=list(range(len(items))))
    return index


def _map_key(segment: Segment) -> str:
    return segment if isinstance(segment, str) else str(segment)


def _lookup(node: Any, segment: Segment) -> Any:
    if isinstance(node, list):
        try:
            return node[_list_index(node, segment)]
        except IndexOutOfRangeError:
            return _MISSING
    if isinstance(node, Mapping):
        return node.get(_map_key(segment), _MISSING)
    return _MISSING


def _assoc(node: Any, segments: tuple[Segment, ...], value: Any) -> Any:
    head, rest = segments[0], segments[1:]

    if isinstance(node, list):
        index = _list_index(node, head)
        items = list(node)
        items[index] = _assoc(node[index], rest, value) if rest else value
        return items

    # Anything that is not a container is replaced by a fresh map.
    container = dict(node) if isinstance(node, Mapping) else {}
    key = _map_key(head)
    if rest:
        container[key] = _assoc(container.get(key), rest, value)
    else:
        container[key] = value
    return container


def _dissoc(node: Any, segments: tuple[Segment, ...]) -> Any:
    """Remove the final segment; return *node* itself when nothing changes."""
    head, rest = segments[0], segments[1:]

    if rest:
        child = _lookup(node, head)
        if child is _MISSING:
            return node
        new_child = _dissoc(child, rest)
        if new_child is child:
            return node
        if isinstance(node, list):
            items = list(node)
            items[_list_index(node, head)] = new_child
            return items
        container = dict(node)
        container[_map_key(head)] = new_child
        return container

    if isinstance(node, list):
        index = _list_index(node, head)
        return node[:index] + node[index + 1 :]
    if isinstance(node, Mapping) and _map_key(head) in node:
        container = dict(node)
        del container[_map_key(head)]
        return container
    return node


def get_path(
    doc: Mapping[str, Any], screen_id: str, path: PathLike, default: Any = None
) -> Any:
    """Read the value at *path* under a screen.

    Args:
        doc: Document snapshot.
        screen_id: Screen to start from.
        path: Typed path or raw segment sequence.
        default: Returned when any segment is absent.

    Returns:
        The stored value, or *default*.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
    """
    node = require_screen(doc, screen_id, context="get_path")
    for segment in to_segments(path):
        node = _lookup(node, segment)
        if node is _MISSING:
            return default
    return node


def set_path(doc: Mapping[str, Any], screen_id: str, path: PathLike, value: Any) -> Document:
    """Return a new document with *value* stored at *path* under a screen.

    Containers on the path are shallow-copied; everything else is shared with
    *doc*. Missing intermediate maps are created. The final segment is
    overwritten regardless of what it held before.

    Args:
        doc: Document snapshot (not modified).
        screen_id: Screen to edit. Must exist.
        path: Typed path or raw segment sequence.
        value: Value to store.

    Returns:
        New document snapshot.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        IndexOutOfRangeError: If a list segment is out of range.
    """
    screen = require_screen(doc, screen_id, context="set_path")
    segments = to_segments(path)
    new_doc = dict(doc)
    new_doc[screen_id] = _assoc(screen, segments, value)
    log.debug("path_set", path=format_path(screen_id, segments))
    return new_doc


def delete_path(doc: Mapping[str, Any], screen_id: str, path: PathLike) -> Document:
    """Return a new document with the final key of *path* removed.

    Only that key is removed. Emptied parent containers are left in place;
    callers collapse optional containers themselves. Deleting a key that is
    not there returns an unchanged copy of the top-level mapping.

    Args:
        doc: Document snapshot (not modified).
        screen_id: Screen to edit. Must exist.
        path: Typed path or raw segment sequence.

    Returns:
        New document snapshot.

    Raises:
        ScreenNotFoundError: If the screen does not exist.
        IndexOutOfRangeError: If the final list segment is out of range.
    """
    screen = require_screen(doc, screen_id, context="delete_path")
    segments = to_segments(path)
    new_screen = _dissoc(screen, segments)
    new_doc = dict(doc)
    new_doc[screen_id] = new_screen
    if new_screen is screen:
        log.debug("path_delete_noop", path=format_path(screen_id, segments))
    else:
        log.debug("path_deleted", path=format_path(screen_id, segments))
    return new_doc
