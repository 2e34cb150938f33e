"""Editor configuration loading.

Settings come from ``screenmap.yaml`` (next to the document, else the
working directory), then environment variables override individual values:

- ``SCREENMAP_LAYOUT``: default layout strategy
- ``SCREENMAP_INDENT``: JSON indentation when saving
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from screenmap.observability.logging import get_logger
from screenmap.projection import LAYOUTS, LayoutSettings

log = get_logger(__name__)

CONFIG_FILENAME = "screenmap.yaml"
DEFAULT_LAYOUT = "grid"
DEFAULT_INDENT = 2


@dataclass
class EditorConfig:
    """Editor settings.

    Attributes:
        layout: Default projection layout ("grid" or "directional").
        grid_columns: Screens per row in the grid layout.
        spacing_x: Horizontal node spacing.
        spacing_y: Vertical spacing between grid rows.
        directional_baseline: Y of screens without up/down triggers.
        directional_offset: Vertical nudge for up/down triggers.
        indent: JSON indentation used when saving documents.
    """

    layout: str = DEFAULT_LAYOUT
    grid_columns: int = 4
    spacing_x: int = 250
    spacing_y: int = 150
    directional_baseline: int = 100
    directional_offset: int = 150
    indent: int = DEFAULT_INDENT

    def __post_init__(self) -> None:
        if self.layout not in LAYOUTS:
            raise ValueError(
                f"Unknown layout '{self.layout}'. Available: {', '.join(sorted(LAYOUTS))}"
            )
        if self.indent < 0:
            raise ValueError(f"indent must be >= 0, got {self.indent}")
        if self.grid_columns < 1:
            raise ValueError(f"grid_columns must be >= 1, got {self.grid_columns}")

    @property
    def layout_settings(self) -> LayoutSettings:
        """Geometry for :func:`screenmap.projection.project`."""
        return LayoutSettings(
            grid_columns=self.grid_columns,
            spacing_x=self.spacing_x,
            spacing_y=self.spacing_y,
            directional_baseline=self.directional_baseline,
            directional_offset=self.directional_offset,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EditorConfig:
        """Create config from a dictionary, ignoring unknown keys.

        Raises:
            ValueError: If a value has the wrong type or is out of range.
        """
        known = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                log.warning("config_unknown_key", key=key)
                continue
            if key == "layout":
                kwargs[key] = str(value)
            else:
                try:
                    kwargs[key] = int(value)
                except (TypeError, ValueError) as e:
                    raise ValueError(f"{key} must be an integer, got {value!r}") from e
        return cls(**kwargs)


def find_config_file(document_path: Path | None = None) -> Path | None:
    """Locate ``screenmap.yaml`` next to the document, else in the cwd."""
    candidates = []
    if document_path is not None:
        candidates.append(document_path.parent / CONFIG_FILENAME)
    candidates.append(Path.cwd() / CONFIG_FILENAME)
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def _read_yaml(config_path: Path) -> dict[str, Any]:
    from ruamel.yaml import YAML
    from ruamel.yaml.error import YAMLError

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)
    except OSError as e:
        log.warning("config_load_failed", path=str(config_path), error=str(e))
        return {}
    except YAMLError as e:
        log.warning("config_parse_failed", path=str(config_path), error=str(e))
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        log.warning("config_not_mapping", path=str(config_path))
        return {}
    return dict(data)


def load_config(
    document_path: Path | None = None,
    *,
    config_path: Path | None = None,
) -> EditorConfig:
    """Load editor configuration.

    Resolution order (highest first):
    1. Environment variables (SCREENMAP_LAYOUT, SCREENMAP_INDENT)
    2. Explicit *config_path*, else ``screenmap.yaml`` found near the document
    3. Defaults

    Args:
        document_path: Document being edited, used to locate the config file.
        config_path: Explicit config file (overrides the search).

    Returns:
        EditorConfig.

    Raises:
        ValueError: If a configured value is invalid.
    """
    path = config_path or find_config_file(document_path)
    data = _read_yaml(path) if path is not None else {}

    # Let ValueError propagate: invalid config should surface clearly.
    if layout := os.getenv("SCREENMAP_LAYOUT"):
        data["layout"] = layout
    if indent := os.getenv("SCREENMAP_INDENT"):
        data["indent"] = indent

    config = EditorConfig.from_dict(data)
    log.debug("config_loaded", path=str(path) if path else None, layout=config.layout)
    return config
