"""Document consistency checks.

Editing operations never cascade: deleting or renaming a screen, trigger or
option can leave ``next_screen`` and ``unlocks_direction`` pointing at things
that no longer exist. These checks report such references without changing
the document. Nothing in the editing path calls them; hosts run them on
demand (``screenmap check``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from screenmap.document.screens import iter_next_screen_refs
from screenmap.models import INSPECT
from screenmap.observability.logging import get_logger

log = get_logger(__name__)


@dataclass
class ValidationCheck:
    """Result of a single validation check.

    Attributes:
        name: Identifier for the check.
        severity: "pass", "warn", or "fail".
        message: Human-readable description of the result.
    """

    name: str
    severity: Literal["pass", "warn", "fail"]
    message: str = ""


@dataclass
class ValidationReport:
    """Aggregated results of validation checks.

    Attributes:
        checks: List of individual validation check results.
    """

    checks: list[ValidationCheck] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        """True if any check has severity 'fail'."""
        return any(c.severity == "fail" for c in self.checks)

    @property
    def has_warnings(self) -> bool:
        """True if any check has severity 'warn'."""
        return any(c.severity == "warn" for c in self.checks)

    @property
    def summary(self) -> str:
        """Human-readable summary of all checks."""
        fails = [c for c in self.checks if c.severity == "fail"]
        warns = [c for c in self.checks if c.severity == "warn"]
        passes = [c for c in self.checks if c.severity == "pass"]

        parts: list[str] = []
        if fails:
            parts.append(f"{len(fails)} failed")
        if warns:
            parts.append(f"{len(warns)} warnings")
        if passes:
            parts.append(f"{len(passes)} passed")
        return ", ".join(parts)


@dataclass(frozen=True)
class DanglingReference:
    """A reference to a screen or direction that does not exist.

    Attributes:
        screen_id: Screen holding the reference.
        path: Segments from the screen to the referencing field.
        target: The missing screen ID or direction.
        kind: "screen" for ``next_screen``, "direction" for ``unlocks_direction``.
    """

    screen_id: str
    path: tuple[str | int, ...]
    target: str
    kind: Literal["screen", "direction"] = "screen"

    @property
    def location(self) -> str:
        return ".".join([self.screen_id, *(str(p) for p in self.path)])


def find_dangling_references(doc: Mapping[str, Any]) -> list[DanglingReference]:
    """List every ``next_screen`` and ``unlocks_direction`` that points nowhere.

    Empty ``next_screen`` values mean "no navigation" and are not reported.
    """
    dangling: list[DanglingReference] = []
    for screen_id, screen in doc.items():
        if not isinstance(screen, Mapping):
            continue
        for path, target in iter_next_screen_refs(screen):
            if target and target not in doc:
                dangling.append(DanglingReference(screen_id, path, str(target)))

        triggers = screen.get("triggers")
        if not isinstance(triggers, Mapping):
            continue
        inspect = triggers.get(INSPECT)
        options = inspect.get("options") if isinstance(inspect, Mapping) else None
        for index, option in enumerate(options if isinstance(options, list) else []):
            if not isinstance(option, Mapping):
                continue
            direction = option.get("unlocks_direction")
            if direction and direction not in triggers:
                path = ("triggers", INSPECT, "options", index, "unlocks_direction")
                dangling.append(DanglingReference(screen_id, path, direction, kind="direction"))
    return dangling


def _granted_items(doc: Mapping[str, Any]) -> set[str]:
    granted: set[str] = set()
    for screen in doc.values():
        triggers = screen.get("triggers") if isinstance(screen, Mapping) else None
        if not isinstance(triggers, Mapping):
            continue
        for trigger in triggers.values():
            options = trigger.get("options") if isinstance(trigger, Mapping) else None
            for option in options if isinstance(options, list) else []:
                grant = option.get("grants_item") if isinstance(option, Mapping) else None
                if isinstance(grant, Mapping) and grant.get("id"):
                    granted.add(grant["id"])
    return granted


def find_unobtainable_items(doc: Mapping[str, Any]) -> list[tuple[str, str, str]]:
    """List ``(screen_id, direction, item_id)`` for required items no option grants."""
    granted = _granted_items(doc)
    missing: list[tuple[str, str, str]] = []
    for screen_id, screen in doc.items():
        unlocks = screen.get("key_item_unlocks") if isinstance(screen, Mapping) else None
        if not isinstance(unlocks, Mapping):
            continue
        for direction, items in unlocks.items():
            for item_id in items if isinstance(items, list) else []:
                if item_id not in granted:
                    missing.append((screen_id, direction, item_id))
    return missing


def check_document(doc: Mapping[str, Any]) -> ValidationReport:
    """Run all consistency checks on a document.

    Returns:
        ValidationReport. An empty document fails; dangling references and
        unobtainable items are warnings.
    """
    report = ValidationReport()

    if doc:
        report.checks.append(
            ValidationCheck("has_screens", "pass", f"{len(doc)} screen(s)")
        )
    else:
        report.checks.append(
            ValidationCheck("has_screens", "fail", "Document has no screens")
        )

    dangling = find_dangling_references(doc)
    if not dangling:
        report.checks.append(ValidationCheck("references", "pass", "All references resolve"))
    for ref in dangling:
        noun = "screen" if ref.kind == "screen" else f"direction on '{ref.screen_id}'"
        report.checks.append(
            ValidationCheck(
                "dangling_reference",
                "warn",
                f"{ref.location} points at missing {noun} '{ref.target}'",
            )
        )

    unobtainable = find_unobtainable_items(doc)
    if not unobtainable:
        report.checks.append(
            ValidationCheck("key_items", "pass", "Every required item is granted somewhere")
        )
    for screen_id, direction, item_id in unobtainable:
        report.checks.append(
            ValidationCheck(
                "unobtainable_item",
                "warn",
                f"{screen_id}.key_item_unlocks.{direction} needs '{item_id}', "
                "which no option grants",
            )
        )

    log.info(
        "document_checked",
        screens=len(doc),
        dangling=len(dangling),
        unobtainable=len(unobtainable),
    )
    return report
