"""Render module for candidate overlays."""

from .overlay import OverlayRenderer, OverlayStyle, draw_overlay

__all__ = ["OverlayRenderer", "OverlayStyle", "draw_overlay"]
