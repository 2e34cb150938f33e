"""ScreenMap: immutable editing and graph projection for screen-based game maps."""

__version__ = "0.3.0"
