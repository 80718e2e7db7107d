"""Highlight the text a PDF revision adds over its predecessor."""

from __future__ import annotations

from .core.types import BBox, GlyphRun, HighlightBox, PageLayout, PageRect, TextUnit
from .errors import CancelledError, InputError, InvalidDimensionsError, RenderError
from .pipeline import HighlightResult, diff_and_highlight
from .presets import HighlightOptions, get_preset, iter_presets

__all__ = [
    "diff_and_highlight",
    "HighlightResult",
    "HighlightOptions",
    "get_preset",
    "iter_presets",
    "BBox",
    "GlyphRun",
    "HighlightBox",
    "PageLayout",
    "PageRect",
    "TextUnit",
    "CancelledError",
    "InputError",
    "InvalidDimensionsError",
    "RenderError",
]

__version__ = "0.1.0"
