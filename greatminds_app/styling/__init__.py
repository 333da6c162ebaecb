"""Styling module for the GreatMindsAlike host window."""

from .color_palette import ColorPalette, Theme

__all__ = ["ColorPalette", "Theme"]
