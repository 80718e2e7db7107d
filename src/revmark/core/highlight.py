"""Turn added ranges into highlight rectangles on the target document."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Sequence

from .reconstruct import run_bbox
from .types import BBox, CharRange, HighlightBox, PageLayout, TextUnit

logger = logging.getLogger(__name__)

PADDING = 1.0
MIN_CHAR_BOX_WIDTH = 2.0
MIN_LINE_HEIGHT = 8.0
MERGE_Y_TOLERANCE = 2.5
MERGE_GAP = 3.0


def _page_index(pages: Iterable[PageLayout]) -> Dict[int, PageLayout]:
    return {page.index: page for page in pages}


def synthesize_token_boxes(
    units: Sequence[TextUnit],
    indexes: Iterable[int],
    pages: Sequence[PageLayout],
    *,
    padding: float = PADDING,
) -> List[HighlightBox]:
    """One padded box per added token."""

    page_map = _page_index(pages)
    boxes: List[HighlightBox] = []
    for i in indexes:
        if not 0 <= i < len(units):
            continue
        unit = units[i]
        page = page_map.get(unit.page_index)
        if page is None:
            logger.warning("token %r references unknown page %d", unit.text, unit.page_index)
            continue
        boxes.append(
            HighlightBox(
                page_index=unit.page_index,
                bbox=unit.bbox.padded(padding),
                viewport=(page.width, page.height),
                origin=page.origin,
                text=unit.text,
            )
        )
    return boxes


def char_range_bbox(
    line: TextUnit,
    start: int,
    end: int,
    length: int,
    *,
    origin: str = "bottom-left",
    min_width: float = MIN_CHAR_BOX_WIDTH,
    min_height: float = MIN_LINE_HEIGHT,
) -> BBox:
    """Box covering characters ``[start, end)`` of a line ``length`` characters long.

    Characters are assumed to share the line's average advance width, so
    the horizontal span is a linear share of the line extent.
    """

    x0 = line.bbox.x
    span = line.bbox.width
    x = x0 + span * start / length
    width = max(min_width, span * (end - start) / length)
    heights = [run_bbox(run, origin).height for run in line.runs]
    height = max(min_height, max(heights) if heights else line.bbox.height)
    return BBox(x, line.bbox.y, width, height)


def synthesize_char_boxes(
    lines: Sequence[TextUnit],
    ranges: Iterable[CharRange],
    pages: Sequence[PageLayout],
    *,
    key: Callable[[str], str] = str,
    padding: float = 0.0,
    min_width: float = MIN_CHAR_BOX_WIDTH,
    min_height: float = MIN_LINE_HEIGHT,
) -> List[HighlightBox]:
    """Map added character ranges of target lines onto page rectangles."""

    page_map = _page_index(pages)
    boxes: List[HighlightBox] = []
    for rng in ranges:
        line = lines[rng.line_index]
        text = key(line.text)
        if not text or rng.end <= rng.start:
            continue
        page = page_map.get(line.page_index)
        if page is None:
            logger.warning("line %d references unknown page %d", rng.line_index, line.page_index)
            continue
        bbox = char_range_bbox(
            line,
            rng.start,
            rng.end,
            len(text),
            origin=page.origin,
            min_width=min_width,
            min_height=min_height,
        )
        if padding:
            bbox = bbox.padded(padding)
        boxes.append(
            HighlightBox(
                page_index=line.page_index,
                bbox=bbox,
                viewport=(page.width, page.height),
                origin=page.origin,
                text=text[rng.start : rng.end],
            )
        )
    return boxes


def _merge(a: HighlightBox, b: HighlightBox) -> HighlightBox:
    x0 = min(a.bbox.x, b.bbox.x)
    x1 = max(a.bbox.x1, b.bbox.x1)
    y = min(a.bbox.y, b.bbox.y)
    height = max(a.bbox.height, b.bbox.height)
    text = " ".join(t for t in (a.text.strip(), b.text.strip()) if t)
    return HighlightBox(a.page_index, BBox(x0, y, x1 - x0, height), a.viewport, a.origin, text)


def coalesce_boxes(
    boxes: Iterable[HighlightBox],
    *,
    y_tolerance: float = MERGE_Y_TOLERANCE,
    gap: float = MERGE_GAP,
) -> List[HighlightBox]:
    """Merge boxes that sit on the same line and touch or nearly touch.

    Rows are seeded by the lowest ``y`` of each page and absorb every box
    within ``y_tolerance`` of the seed. Inside a row, a box starting no
    further than ``gap`` past the running right edge is merged into it.
    Running the function on its own output returns the same boxes.
    """

    ordered = sorted(boxes, key=lambda b: (b.page_index, b.bbox.y, b.bbox.x))

    rows: List[List[HighlightBox]] = []
    seed = None
    for box in ordered:
        if (
            rows
            and seed is not None
            and box.page_index == seed.page_index
            and abs(box.bbox.y - seed.bbox.y) <= y_tolerance
        ):
            rows[-1].append(box)
        else:
            rows.append([box])
            seed = box

    merged: List[HighlightBox] = []
    for row in rows:
        row.sort(key=lambda b: b.bbox.x)
        current = row[0]
        for box in row[1:]:
            if box.bbox.x <= current.bbox.x1 + gap:
                current = _merge(current, box)
            else:
                merged.append(current)
                current = box
        merged.append(current)

    logger.debug("coalesced %d boxes into %d", len(ordered), len(merged))
    return merged
