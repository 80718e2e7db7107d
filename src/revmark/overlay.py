"""Paint translucent highlight rectangles onto a PDF copy."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import fitz

from .core.extraction import open_document, page_dimensions
from .core.projection import project_boxes
from .core.types import HighlightBox, PageRect
from .errors import RenderError

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float]


@dataclass(frozen=True)
class AnnotationStyle:
    fill_color: Color = (1.0, 1.0, 0.0)
    fill_opacity: float = 0.35
    stroke_width: float = 0.0
    stroke_color: Optional[Color] = None


def _clamp(value: float, minimum: float = 0.0, maximum: float = 1.0) -> float:
    return max(minimum, min(value, maximum))


def make_annotation_style(
    fill_color: Color,
    *,
    fill_opacity: float,
    stroke_width: float = 0.0,
    stroke_color: Optional[Color] = None,
) -> AnnotationStyle:
    """Create a style, defaulting the border to the fill colour when one is drawn."""

    fill = tuple(_clamp(channel) for channel in fill_color)
    if stroke_width > 0 and stroke_color is None:
        stroke_color = fill  # type: ignore[assignment]
    return AnnotationStyle(
        fill_color=fill,  # type: ignore[arg-type]
        fill_opacity=_clamp(fill_opacity),
        stroke_width=max(0.0, stroke_width),
        stroke_color=stroke_color,
    )


class RenderHandle:
    """Mutable view of a PDF taking rectangles in bottom-left unrotated page space."""

    def __init__(self, doc: fitz.Document):
        self._doc = doc
        self._shapes: Dict[int, fitz.Shape] = {}

    @property
    def page_count(self) -> int:
        return len(self._doc)

    def page_size(self, page_index: int) -> Tuple[float, float]:
        return page_dimensions(self._doc[page_index])

    def draw_rectangle(
        self,
        page_index: int,
        x: float,
        y: float,
        width: float,
        height: float,
        fill_color: Color,
        opacity: float,
        border_width: float = 0.0,
        border_color: Optional[Color] = None,
    ) -> None:
        page = self._doc[page_index]
        # shapes and extracted text both live in the unrotated page
        _, page_height = page_dimensions(page)
        top = page_height - (y + height)
        rect = fitz.Rect(x, top, x + width, top + height)
        shape = self._shapes.get(page_index)
        if shape is None:
            shape = self._shapes[page_index] = page.new_shape()
        shape.draw_rect(rect)
        shape.finish(
            color=border_color if border_width > 0 else None,
            width=border_width,
            fill=fill_color,
            fill_opacity=opacity,
        )

    def save(self) -> bytes:
        try:
            for shape in self._shapes.values():
                shape.commit()
            self._shapes.clear()
            return self._doc.tobytes(garbage=3, deflate=True)
        except Exception as exc:
            raise RenderError(f"Failed to save highlighted PDF: {exc}") from exc

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> "RenderHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def load_document(data: bytes, name: str = "new") -> RenderHandle:
    return RenderHandle(open_document(data, name))


def draw_rects(handle: RenderHandle, rects: Iterable[PageRect], style: AnnotationStyle) -> int:
    """Draw ``rects`` with ``style``; returns how many were painted."""

    count = 0
    for rect in rects:
        if not 0 <= rect.page_index < handle.page_count:
            continue
        handle.draw_rectangle(
            rect.page_index,
            rect.x,
            rect.y,
            rect.width,
            rect.height,
            style.fill_color,
            style.fill_opacity,
            style.stroke_width,
            style.stroke_color,
        )
        count += 1
    return count


def render_highlights(
    data: bytes,
    boxes: Sequence[HighlightBox],
    style: AnnotationStyle,
) -> Tuple[bytes, List[PageRect]]:
    """Project ``boxes`` onto the pages of ``data`` and paint them.

    Returns the new PDF bytes and the rectangles actually drawn.
    """

    with load_document(data) as handle:
        sizes = [handle.page_size(i) for i in range(handle.page_count)]
        rects = project_boxes(boxes, sizes, target_origin="bottom-left")
        painted = draw_rects(handle, rects, style)
        logger.info("painted %d highlight rectangles", painted)
        return handle.save(), rects
