"""Document package - immutable editing of the screen map document.

The document is a plain dict mapping screen IDs to screen dicts. Every
operation here returns a new snapshot and shares unmodified subtrees with
the input; nothing is edited in place.
"""

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
from screenmap.document.io import (
    dumps_document,
    load_document,
    loads_document,
    new_document,
    parse_document,
    save_document,
    screen_view,
)
from screenmap.document.mutations import Document, delete_path, get_path, set_path
from screenmap.document.paths import (
    AdditionalMessagePath,
    BackgroundPath,
    KeyItemUnlockPath,
    OptionPath,
    TriggerPath,
)
from screenmap.document.screens import (
    ScreenCreated,
    ScreenDeleted,
    create_screen,
    delete_screen,
    rename_screen,
    set_background,
    set_key_item_unlocks,
)
from screenmap.document.triggers import (
    MessageAdded,
    OptionAdded,
    add_additional_message,
    add_inspect_option,
    add_trigger,
    delete_additional_message,
    delete_inspect_option,
    delete_trigger,
    find_option_index,
    update_additional_message,
    update_inspect_option,
    update_trigger,
)
from screenmap.document.validation import (
    DanglingReference,
    ValidationCheck,
    ValidationReport,
    check_document,
)

__all__ = [
    "AdditionalMessagePath",
    "BackgroundPath",
    "DanglingReference",
    "DirectionExistsError",
    "DirectionNotFoundError",
    "Document",
    "DocumentError",
    "DocumentValidationError",
    "DuplicateIdentifierError",
    "IndexOutOfRangeError",
    "InvalidIdentifierError",
    "KeyItemUnlockPath",
    "LastScreenRemainingError",
    "MessageAdded",
    "OptionAdded",
    "OptionPath",
    "ScreenCreated",
    "ScreenDeleted",
    "ScreenNotFoundError",
    "TriggerPath",
    "UnknownFieldError",
    "ValidationCheck",
    "ValidationReport",
    "add_additional_message",
    "add_inspect_option",
    "add_trigger",
    "check_document",
    "create_screen",
    "delete_additional_message",
    "delete_inspect_option",
    "delete_path",
    "delete_screen",
    "delete_trigger",
    "dumps_document",
    "find_option_index",
    "get_path",
    "load_document",
    "loads_document",
    "new_document",
    "parse_document",
    "rename_screen",
    "save_document",
    "screen_view",
    "set_background",
    "set_key_item_unlocks",
    "set_path",
    "update_additional_message",
    "update_inspect_option",
    "update_trigger",
]
