"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest


@pytest.fixture(autouse=True)
def isolate_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep user environment overrides out of test runs."""
    monkeypatch.delenv("SCREENMAP_LAYOUT", raising=False)
    monkeypatch.delenv("SCREENMAP_INDENT", raising=False)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def sample_doc() -> dict[str, Any]:
    """Two screens joined by a single rightward trigger."""
    return {
        "start": {
            "background": "bg.png",
            "triggers": {"right": {"message": "go", "next_screen": "hall"}},
        },
        "hall": {"background": "hall.png", "triggers": {}},
    }


@pytest.fixture
def rich_doc() -> dict[str, Any]:
    """Three screens with hidden triggers, inspect options and progressive messages."""
    return {
        "start": {
            "background": "bg.png",
            "key_item_unlocks": {"up": ["brass_key"]},
            "triggers": {
                "right": {"message": "go", "next_screen": "hall"},
                "up": {"message": "A locked stair.", "next_screen": "tower", "hidden": True},
                "inspect": {
                    "message": "You look around.",
                    "options": [
                        {
                            "id": "opt-desk",
                            "label": "Desk",
                            "message": "A dusty desk.",
                            "tp_cost": 1,
                            "next_screen": "hall",
                            "grants_item": {"id": "brass_key", "type": "key"},
                            "additional_message": {
                                "2": {"message": "Still dusty."},
                                "10": {"message": "Really dusty.", "tp_cost": 1},
                            },
                        },
                        {
                            "id": "opt-window",
                            "label": "Window",
                            "message": "Rain.",
                            "once": True,
                        },
                    ],
                },
            },
        },
        "hall": {
            "background": "hall.png",
            "triggers": {"left": {"message": "back", "next_screen": "start"}},
        },
        "tower": {"background": "tower.png", "key_item_unlocks": {}, "triggers": {}},
    }
