"""Color palette for the host window supporting light and dark themes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Theme(Enum):
    """Application theme options."""
    LIGHT = auto()
    DARK = auto()


@dataclass(frozen=True)
class ThemeColors:
    """Color definitions for a specific theme."""
    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        """Get color value for the specified theme."""
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the application."""

    # Text colors
    TEXT_PRIMARY = ThemeColors(
        light="#0F172A",      # Slate 900
        dark="#F5F7FF"        # Near white
    )

    TEXT_SECONDARY = ThemeColors(
        light="#475569",      # Slate 600
        dark="#94A3B8"        # Slate 400
    )

    # Background colors
    BACKGROUND_PRIMARY = ThemeColors(
        light="#F8FAFC",      # Slate 50
        dark="#0A0A0F"        # Stage black
    )

    BACKGROUND_SECONDARY = ThemeColors(
        light="#E2E8F0",      # Slate 200
        dark="#111A30"        # Card navy
    )

    # Accent colors
    ACCENT_PRIMARY = ThemeColors(
        light="#6D28D9",      # Violet
        dark="#7C3AED"        # Brighter violet
    )

    # Status colors
    SUCCESS = ThemeColors(
        light="#15803D",      # Green
        dark="#4ADE80"        # Light green
    )

    ERROR = ThemeColors(
        light="#B91C1C",      # Red
        dark="#F87171"        # Light red
    )

    # Border colors
    BORDER_PRIMARY = ThemeColors(
        light="#CBD5E1",      # Slate 300
        dark="#334155"        # Slate 700
    )

    # Button colors
    BUTTON_PRIMARY_TEXT = ThemeColors(
        light="#FFFFFF",
        dark="#FFFFFF"
    )

    BUTTON_SECONDARY_BG = ThemeColors(
        light="#E2E8F0",      # Slate 200
        dark="#1E293B"        # Slate 800
    )

    BUTTON_HOVER_BG = ThemeColors(
        light="#CBD5E1",      # Slate 300
        dark="#334155"        # Slate 700
    )

    # Answer cloud
    CLOUD_BACKGROUND = ThemeColors(
        light="#FFFFFF",
        dark="#0B1120"
    )

    CLOUD_PLACEHOLDER_TEXT = ThemeColors(
        light="#1E293B",
        dark="#E2E8F0"
    )

    WINNER_OUTLINE = ThemeColors(
        light="#CA8A04",      # Amber
        dark="#FACC15"        # Gold
    )
