"""Project highlight boxes from extraction viewports onto rendering pages."""
from __future__ import annotations

import logging
import warnings
from typing import List, Sequence, Tuple

import numpy as np

from ..errors import GeometryWarning
from .types import HighlightBox, Origin, PageRect

logger = logging.getLogger(__name__)


def _warn(message: str, *args) -> None:
    logger.warning(message, *args)
    warnings.warn(message % args, GeometryWarning, stacklevel=3)


def project_boxes(
    boxes: Sequence[HighlightBox],
    page_sizes: Sequence[Tuple[float, float]],
    *,
    target_origin: Origin = "bottom-left",
) -> List[PageRect]:
    """Rescale ``boxes`` into the native space of the rendering pages.

    ``page_sizes`` lists ``(width, height)`` for every page of the target
    document. Each axis is scaled independently and the vertical axis is
    flipped when the box was measured with a different origin than
    ``target_origin``. Boxes on pages that do not exist, or falling
    entirely outside their page, are dropped; the rest are clipped to the
    page bounds.
    """

    kept: List[HighlightBox] = []
    for box in boxes:
        if not 0 <= box.page_index < len(page_sizes):
            _warn("dropping box on page %d: document has %d pages", box.page_index, len(page_sizes))
            continue
        if box.viewport[0] <= 0 or box.viewport[1] <= 0:
            _warn("dropping box on page %d: empty viewport %r", box.page_index, box.viewport)
            continue
        kept.append(box)
    if not kept:
        return []

    rects = np.array(
        [[b.bbox.x, b.bbox.y, b.bbox.width, b.bbox.height] for b in kept], dtype=float
    )
    viewports = np.array([b.viewport for b in kept], dtype=float)
    pages = np.array([page_sizes[b.page_index] for b in kept], dtype=float)
    flip = np.array([b.origin != target_origin for b in kept])

    scale = pages / viewports
    x0 = rects[:, 0] * scale[:, 0]
    width = rects[:, 2] * scale[:, 0]
    height = rects[:, 3] * scale[:, 1]
    y0 = np.where(
        flip,
        pages[:, 1] - (rects[:, 1] + rects[:, 3]) * scale[:, 1],
        rects[:, 1] * scale[:, 1],
    )

    cx0 = np.clip(x0, 0.0, pages[:, 0])
    cy0 = np.clip(y0, 0.0, pages[:, 1])
    cx1 = np.clip(x0 + width, 0.0, pages[:, 0])
    cy1 = np.clip(y0 + height, 0.0, pages[:, 1])

    out: List[PageRect] = []
    for i, box in enumerate(kept):
        w = float(cx1[i] - cx0[i])
        h = float(cy1[i] - cy0[i])
        if w <= 0 or h <= 0:
            _warn("dropping box outside page %d: %r", box.page_index, box.bbox)
            continue
        if w < width[i] or h < height[i]:
            logger.debug("clipped box on page %d to the page bounds", box.page_index)
        out.append(PageRect(box.page_index, float(cx0[i]), float(cy0[i]), w, h, box.text))
    return out
