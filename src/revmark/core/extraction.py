"""Glyph run extraction using PyMuPDF.

Each text span reported by :meth:`fitz.Page.get_text` becomes one
:class:`GlyphRun`. Placements are expressed in PDF user space: origin at
the bottom-left corner of the unrotated page and ``y`` on the baseline, the
way a content stream positions text. An empty run closes every extracted
line so that token reconstruction never glues words across line breaks.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

import fitz  # PyMuPDF

from ..errors import CancelledError, InputError, InvalidDimensionsError
from .types import GlyphRun, PageLayout

logger = logging.getLogger(__name__)


def open_document(data: bytes, name: str = "document") -> fitz.Document:
    """Open PDF ``data`` raising :class:`InputError` when it is unusable."""

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise InputError(f"Failed to load {name} PDF: {exc}") from exc
    if doc.needs_pass:
        doc.close()
        raise InputError(f"Failed to load {name} PDF: document is encrypted")
    if doc.page_count == 0:
        doc.close()
        raise InputError(f"Failed to load {name} PDF: document has no pages")
    return doc


def page_dimensions(page: fitz.Page) -> Tuple[float, float]:
    """Width and height of the unrotated page, the space text and shapes share."""

    box = page.cropbox
    return box.width, box.height


def _page_runs(page: fitz.Page, page_index: int) -> List[GlyphRun]:
    _, page_height = page_dimensions(page)
    runs: List[GlyphRun] = []
    text = page.get_text("dict", sort=True)
    for block in text.get("blocks", []):
        if block.get("type", 0) != 0:
            continue
        for line in block.get("lines", []):
            dx, dy = line.get("dir", (1.0, 0.0))
            last: Optional[GlyphRun] = None
            for span in line.get("spans", []):
                size = float(span.get("size", 0.0))
                ox, oy = span["origin"]
                x0, _, x1, _ = span["bbox"]
                last = GlyphRun(
                    text=span.get("text", ""),
                    transform=(
                        size * dx,
                        size * -dy,
                        size * dy,
                        size * dx,
                        float(ox),
                        page_height - float(oy),
                    ),
                    width=float(x1 - x0),
                    height=size,
                    page_index=page_index,
                )
                runs.append(last)
            if last is not None:
                runs.append(GlyphRun("", last.transform, 0.0, 0.0, page_index))
    return runs


def extract_layout(
    data: bytes,
    *,
    name: str = "document",
    cancel_callback: Optional[Callable[[], bool]] = None,
) -> List[PageLayout]:
    """Return the glyph runs of every page of the PDF in ``data``."""

    pages: List[PageLayout] = []
    with open_document(data, name) as doc:
        for i, page in enumerate(doc):
            width, height = page_dimensions(page)
            if width <= 0 or height <= 0:
                logger.error("Invalid PDF dimensions on page %d: %.2fx%.2f", i, width, height)
                raise InvalidDimensionsError(
                    f"Invalid page dimensions in {name} PDF: {width}x{height}"
                )
            try:
                runs = _page_runs(page, i)
            except Exception as exc:
                raise InputError(f"Failed to read page {i + 1} of {name} PDF: {exc}") from exc
            pages.append(PageLayout(i, width, height, runs, "bottom-left"))
            logger.debug("%s page %d: %d glyph runs", name, i, len(runs))
            if cancel_callback and cancel_callback():
                raise CancelledError()
    return pages
