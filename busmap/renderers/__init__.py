"""
Renderers for busmap.

Renderers convert DisplayData to specific output formats.
"""

from busmap.renderers.base import Renderer
from busmap.renderers.text import TextRenderer

__all__ = [
    "Renderer",
    "TextRenderer",
]
