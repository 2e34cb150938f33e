"""Screen map projection.

Derives a node/edge graph from the document for display: one node per
screen, one primary edge per trigger with a ``next_screen``, and one branch
edge per inspect option with its own ``next_screen``. Pure function of the
document and the chosen layout; nothing is written back.

Layouts only decide node positions. Edges depend on the document alone.
Graphs may be cyclic and may hold several edges between the same pair of
screens; neither is filtered.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any, Literal, TypeAlias

from screenmap.models import INSPECT
from screenmap.observability.logging import get_logger

log = get_logger(__name__)

EdgeVariant = Literal["primary", "branch"]
LayoutName = Literal["grid", "directional"]

_BRANCH_DASH = "5 5"
_BRANCH_COLOR = "#6A5ACD"  # slate blue for narrative-choice transitions


@dataclass(frozen=True)
class LayoutSettings:
    """Geometry shared by the layout strategies.

    Attributes:
        grid_columns: Screens per row in the grid layout.
        spacing_x: Horizontal distance between neighbouring screens.
        spacing_y: Vertical distance between grid rows.
        directional_baseline: Y of screens without up/down triggers.
        directional_offset: Shift applied for an up (minus) or down (plus) trigger.
    """

    grid_columns: int = 4
    spacing_x: int = 250
    spacing_y: int = 150
    directional_baseline: int = 100
    directional_offset: int = 150

    def __post_init__(self) -> None:
        if self.grid_columns < 1:
            raise ValueError(f"grid_columns must be >= 1, got {self.grid_columns}")


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass
class FlowNode:
    """A screen in the projection."""

    id: str
    position: Position
    label: str


@dataclass
class FlowEdge:
    """A transition between two screens."""

    id: str
    source: str
    target: str
    label: str
    variant: EdgeVariant = "primary"


@dataclass
class Projection:
    """Complete node/edge graph derived from a document."""

    nodes: list[FlowNode] = field(default_factory=list)
    edges: list[FlowEdge] = field(default_factory=list)
    layout: str = "grid"

    def to_dict(self) -> dict[str, Any]:
        """Return ``{"nodes": [...], "edges": [...]}`` as plain JSON data."""
        return {
            "nodes": [asdict(n) for n in self.nodes],
            "edges": [asdict(e) for e in self.edges],
        }

    def to_react_flow(self) -> dict[str, Any]:
        """Return React Flow elements as consumed by the browser editor.

        Primary edges are animated smoothstep edges; branch edges are dashed.
        """
        nodes = [
            {
                "id": n.id,
                "position": {"x": n.position.x, "y": n.position.y},
                "data": {"label": n.label},
                "type": "default",
                "draggable": True,
            }
            for n in self.nodes
        ]
        edges = []
        for e in self.edges:
            element: dict[str, Any] = {
                "id": e.id,
                "source": e.source,
                "target": e.target,
                "label": e.label,
                "type": "smoothstep",
                "animated": e.variant == "primary",
                "markerEnd": {"type": "arrowclosed"},
            }
            if e.variant == "branch":
                element["style"] = {"strokeDasharray": _BRANCH_DASH}
            edges.append(element)
        return {"nodes": nodes, "edges": edges}


# ---------------------------------------------------------------------------
# Layouts
# ---------------------------------------------------------------------------

LayoutFn: TypeAlias = Callable[[int, Mapping[str, Any], LayoutSettings], Position]


def grid_layout(index: int, screen: Mapping[str, Any], settings: LayoutSettings) -> Position:
    """Wrap screens into rows of ``grid_columns``, ignoring topology."""
    row, col = divmod(index, settings.grid_columns)
    return Position(x=col * settings.spacing_x, y=row * settings.spacing_y)


def directional_layout(
    index: int, screen: Mapping[str, Any], settings: LayoutSettings
) -> Position:
    """Line screens up left to right; nudge screens with up/down exits."""
    triggers = screen.get("triggers") if isinstance(screen, Mapping) else None
    triggers = triggers if isinstance(triggers, Mapping) else {}
    y = settings.directional_baseline
    if "up" in triggers:
        y -= settings.directional_offset
    if "down" in triggers:
        y += settings.directional_offset
    return Position(x=index * settings.spacing_x, y=y)


LAYOUTS: dict[str, LayoutFn] = {
    "grid": grid_layout,
    "directional": directional_layout,
}


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def _screen_edges(screen_id: str, screen: Mapping[str, Any]) -> list[FlowEdge]:
    triggers = screen.get("triggers") if isinstance(screen, Mapping) else None
    if not isinstance(triggers, Mapping):
        return []

    edges: list[FlowEdge] = []
    for direction, trigger in triggers.items():
        if not isinstance(trigger, Mapping):
            continue
        target = trigger.get("next_screen")
        if target:
            edges.append(
                FlowEdge(
                    id=f"{screen_id}-{direction}-{target}",
                    source=screen_id,
                    target=target,
                    label=direction,
                )
            )
        if direction != INSPECT:
            continue
        options = trigger.get("options")
        for index, option in enumerate(options if isinstance(options, list) else []):
            target = option.get("next_screen") if isinstance(option, Mapping) else None
            if target:
                edges.append(
                    FlowEdge(
                        id=f"{screen_id}-{direction}-{index}-{target}",
                        source=screen_id,
                        target=target,
                        label=f"{direction}:{index}",
                        variant="branch",
                    )
                )
    return edges


def project(
    doc: Mapping[str, Any],
    layout: str = "grid",
    *,
    settings: LayoutSettings | None = None,
) -> Projection:
    """Derive the node/edge graph of a document.

    Args:
        doc: Document snapshot.
        layout: Layout strategy name (see ``LAYOUTS``).
        settings: Layout geometry; defaults to ``LayoutSettings()``.

    Returns:
        Projection with nodes in document order and edges grouped by screen.

    Raises:
        ValueError: If *layout* is not a known strategy.
    """
    place = LAYOUTS.get(layout)
    if place is None:
        raise ValueError(f"Unknown layout '{layout}'. Available: {', '.join(sorted(LAYOUTS))}")
    settings = settings or LayoutSettings()

    nodes: list[FlowNode] = []
    edges: list[FlowEdge] = []
    for index, (screen_id, screen) in enumerate(doc.items()):
        nodes.append(FlowNode(id=screen_id, position=place(index, screen, settings), label=screen_id))
        edges.extend(_screen_edges(screen_id, screen))

    log.debug("projection_built", layout=layout, nodes=len(nodes), edges=len(edges))
    return Projection(nodes=nodes, edges=edges, layout=layout)


# ---------------------------------------------------------------------------
# Text renderers
# ---------------------------------------------------------------------------


def render_dot(projection: Projection, *, no_labels: bool = False) -> str:
    """Render a Projection as DOT (Graphviz) markup.

    Args:
        projection: Projected graph.
        no_labels: If True, omit direction labels on edges.

    Returns:
        DOT format string.
    """
    lines = [
        "digraph screens {",
        "  rankdir=LR;",
        '  node [fontname="Helvetica" fontsize=10 shape=box style="rounded"];',
        '  edge [fontname="Helvetica" fontsize=8];',
        "",
    ]

    for node in projection.nodes:
        lines.append(f'  "{_dot_escape(node.id)}" [label="{_dot_escape(node.label)}"];')

    lines.append("")

    for edge in projection.edges:
        attrs: dict[str, str] = {}
        if not no_labels and edge.label:
            attrs["label"] = f'"{_dot_escape(edge.label)}"'
        if edge.variant == "branch":
            attrs["style"] = '"dashed"'
            attrs["color"] = f'"{_BRANCH_COLOR}"'
        attr_str = " ".join(f"{k}={v}" for k, v in attrs.items())
        suffix = f" [{attr_str}]" if attr_str else ""
        lines.append(f'  "{_dot_escape(edge.source)}" -> "{_dot_escape(edge.target)}"{suffix};')

    lines.append("}")
    return "\n".join(lines)


def render_mermaid(projection: Projection, *, no_labels: bool = False) -> str:
    """Render a Projection as Mermaid markup.

    Args:
        projection: Projected graph.
        no_labels: If True, omit direction labels on edges.

    Returns:
        Mermaid format string.
    """
    lines = ["graph LR"]

    for node in projection.nodes:
        lines.append(f'  {_mermaid_id(node.id)}["{_mermaid_escape(node.label)}"]')

    lines.append("")

    for edge in projection.edges:
        src = _mermaid_id(edge.source)
        dst = _mermaid_id(edge.target)
        arrow = "-.->" if edge.variant == "branch" else "-->"
        if not no_labels and edge.label:
            lines.append(f'  {src} {arrow}|"{_mermaid_escape(edge.label)}"| {dst}')
        else:
            lines.append(f"  {src} {arrow} {dst}")

    branch_indices = [i for i, e in enumerate(projection.edges) if e.variant == "branch"]
    if branch_indices:
        idx_list = ",".join(str(i) for i in branch_indices)
        lines.append("")
        lines.append(f"  linkStyle {idx_list} stroke:{_BRANCH_COLOR},stroke-width:2px")

    return "\n".join(lines)


def _dot_escape(text: str) -> str:
    """Escape special characters for DOT labels."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _mermaid_id(node_id: str) -> str:
    """Convert a screen ID to a Mermaid-safe identifier."""
    return "s_" + re.sub(r"\W", "_", node_id)


def _mermaid_escape(text: str) -> str:
    """Escape special characters for Mermaid labels."""
    return text.replace('"', "&quot;").replace("\n", " ")
