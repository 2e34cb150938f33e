"""Document error types with actionable feedback.

These errors are raised at the API boundary, before any mutation is
attempted, so a rejected edit never leaves a partially updated document.

Each error type carries the offending values and can format itself as a
multi-line message explaining what went wrong and how to fix it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from difflib import get_close_matches
from typing import Any

_MAX_LISTED = 20


class DocumentError(Exception):
    """Base class for rejected document operations.

    Subclasses must implement to_feedback() to provide an actionable
    message for the host shell.
    """

    def to_feedback(self) -> str:
        """Format error as actionable feedback.

        Returns:
            Human-readable message explaining what's wrong and how to fix it.
        """
        raise NotImplementedError


def _bullet_list(values: list[str], limit: int = _MAX_LISTED) -> list[str]:
    lines = [f"  - `{v}`" for v in values[:limit]]
    if len(values) > limit:
        lines.append(f"  - ... and {len(values) - limit} more")
    return lines


@dataclass
class InvalidIdentifierError(DocumentError):
    """Raised when a screen ID is empty or missing.

    Attributes:
        screen_id: The rejected value (may be None).
    """

    screen_id: str | None

    def __post_init__(self) -> None:
        super().__init__(f"Invalid screen ID: {self.screen_id!r}")

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        return f"""## Error: Invalid Screen ID

**You entered**: `{self.screen_id!r}`

**Problem**: Screen IDs must be non-empty strings.
"""


@dataclass
class DuplicateIdentifierError(DocumentError):
    """Raised when creating or renaming to a screen ID that already exists.

    Attributes:
        screen_id: The ID that already exists.
    """

    screen_id: str

    def __post_init__(self) -> None:
        super().__init__(f"Screen '{self.screen_id}' already exists")

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        return f"""## Error: Screen Already Exists

**You tried to create**: `{self.screen_id}`

**Problem**: A screen with this ID already exists in the document.

**Solutions**:
1. Use a different ID for the new screen
2. Edit the existing screen instead of creating it again
"""


@dataclass
class LastScreenRemainingError(DocumentError):
    """Raised when deleting the only screen in a document.

    Attributes:
        screen_id: The screen that cannot be removed.
    """

    screen_id: str

    def __post_init__(self) -> None:
        super().__init__(f"Cannot delete '{self.screen_id}': it is the last screen")

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        return f"""## Error: Last Screen Remaining

**Screen**: `{self.screen_id}`

**Problem**: A document must always contain at least one screen.

**Solution**: Create another screen before deleting this one.
"""


@dataclass
class ScreenNotFoundError(DocumentError):
    """Raised when an operation names a screen that does not exist.

    Attributes:
        screen_id: The ID that was referenced.
        available: Screen IDs present in the document.
        context: Operation that made the reference.
    """

    screen_id: str
    available: list[str] = field(default_factory=list)
    context: str = ""

    def __post_init__(self) -> None:
        msg = f"Screen '{self.screen_id}' not found"
        if self.context:
            msg += f" ({self.context})"
        super().__init__(msg)

    def suggestions(self) -> list[str]:
        """Find similar IDs that might be typos."""
        return get_close_matches(self.screen_id, self.available, n=3, cutoff=0.6)

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        lines = [
            "## Reference Error: Screen Not Found",
            "",
            f"**You referenced**: `{self.screen_id}`",
        ]
        if self.context:
            lines.append(f"**Context**: {self.context}")
        lines.extend(["", "**Problem**: This screen does not exist in the document.", ""])

        suggestions = self.suggestions()
        if suggestions:
            lines.append("**Did you mean one of these?**")
            lines.extend(f"  - `{s}`" for s in suggestions)
            lines.append("")

        if self.available:
            lines.append("**Valid screen IDs**:")
            lines.extend(_bullet_list(sorted(self.available)))

        return "\n".join(lines)


@dataclass
class IndexOutOfRangeError(DocumentError):
    """Raised when an option index or message ordinal does not exist.

    Attributes:
        kind: What was addressed ("option", "additional_message", ...).
        index: The index or ordinal that was used.
        valid: Indices or ordinals that exist at this point.
        screen_id: Screen the address belongs to.
    """

    kind: str
    index: Any
    valid: list[Any] = field(default_factory=list)
    screen_id: str = ""

    def __post_init__(self) -> None:
        where = f" on screen '{self.screen_id}'" if self.screen_id else ""
        super().__init__(f"No {self.kind} at {self.index!r}{where}")

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        lines = [
            f"## Error: {self.kind.replace('_', ' ').title()} Not Found",
            "",
            f"**You addressed**: `{self.index!r}`",
        ]
        if self.screen_id:
            lines.append(f"**Screen**: `{self.screen_id}`")
        lines.append("")
        if self.valid:
            lines.append("**Valid values**:")
            lines.extend(_bullet_list([str(v) for v in self.valid]))
        else:
            lines.append(f"**Problem**: There is no {self.kind} to address yet.")
        return "\n".join(lines)


@dataclass
class DirectionExistsError(DocumentError):
    """Raised when adding a trigger for a direction that already has one.

    Attributes:
        screen_id: Screen being edited.
        direction: Direction that is already defined.
    """

    screen_id: str
    direction: str

    def __post_init__(self) -> None:
        super().__init__(
            f"Screen '{self.screen_id}' already has a '{self.direction}' trigger"
        )

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        return f"""## Error: Trigger Already Exists

**Screen**: `{self.screen_id}`
**Direction**: `{self.direction}`

**Problem**: Each direction holds at most one trigger.

**Solution**: Update the existing trigger instead of adding a new one.
"""


@dataclass
class DirectionNotFoundError(DocumentError):
    """Raised when an operation names a direction the screen does not define.

    Attributes:
        screen_id: Screen being edited.
        direction: Missing direction.
        available: Directions the screen does define.
    """

    screen_id: str
    direction: str
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(f"Screen '{self.screen_id}' has no '{self.direction}' trigger")

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        lines = [
            "## Error: Trigger Not Found",
            "",
            f"**Screen**: `{self.screen_id}`",
            f"**Direction**: `{self.direction}`",
            "",
        ]
        if self.available:
            lines.append("**Defined directions**:")
            lines.extend(_bullet_list(self.available))
        else:
            lines.append("**Problem**: This screen has no triggers yet.")
        return "\n".join(lines)


@dataclass
class UnknownFieldError(DocumentError):
    """Raised when an edit names a property the record type does not have.

    Attributes:
        record: Record type name ("Trigger", "Option", ...).
        name: The unknown property.
        allowed: Properties the record accepts.
    """

    record: str
    name: str
    allowed: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(f"{self.record} has no field '{self.name}'")

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        lines = [
            f"## Error: Unknown {self.record} Field",
            "",
            f"**You used**: `{self.name}`",
            "",
        ]
        close = get_close_matches(self.name, self.allowed, n=1, cutoff=0.6)
        if close:
            lines.extend([f"**Did you mean**: `{close[0]}`", ""])
        lines.append("**Allowed fields**:")
        lines.extend(_bullet_list(self.allowed))
        return "\n".join(lines)


@dataclass
class DocumentValidationError(DocumentError):
    """Raised when a document or a field value fails schema validation.

    Attributes:
        errors: Flattened validation messages (``location: message``).
        source: Where the data came from (file path, field name, ...).
    """

    errors: list[str]
    source: str = ""

    def __post_init__(self) -> None:
        msg = "Document validation failed"
        if self.source:
            msg += f" ({self.source})"
        msg += f": {len(self.errors)} error(s)"
        super().__init__(msg)

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        lines = ["## Error: Invalid Document", ""]
        if self.source:
            lines.extend([f"**Source**: `{self.source}`", ""])
        lines.extend(f"  - {e}" for e in self.errors[:_MAX_LISTED])
        if len(self.errors) > _MAX_LISTED:
            lines.append(f"  - ... and {len(self.errors) - _MAX_LISTED} more")
        return "\n".join(lines)
