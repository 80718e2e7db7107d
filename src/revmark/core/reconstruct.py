"""Rebuild positioned text units from raw glyph runs.

Two granularities are supported. Token mode yields one unit per word and
is what the token-level alignment consumes. Line mode clusters runs into
visual lines, keeping the constituent runs so that character ranges can
later be mapped back onto the page.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from ..utils.normalize import collapse_whitespace, dense_ratio, is_blank, split_words
from .types import BBox, GlyphRun, Origin, PageLayout, TextUnit

logger = logging.getLogger(__name__)

BASELINE_SHIFT = 0.2
LATIN_WIDTH_FACTOR = 0.5
DENSE_WIDTH_FACTOR = 1.0
Y_CLUSTER_TOLERANCE = 2.5
JOIN_GAP_THRESHOLD = 2.0


def _font_height(run: GlyphRun) -> float:
    _, _, _, d, _, _ = run.transform
    return abs(d) or abs(run.transform[0])


def estimate_width(text: str, font_height: float) -> float:
    """Guess the advance width of ``text`` when extraction did not measure it."""

    ratio = dense_ratio(text)
    factor = LATIN_WIDTH_FACTOR + (DENSE_WIDTH_FACTOR - LATIN_WIDTH_FACTOR) * ratio
    return len(text) * font_height * factor


def run_bbox(run: GlyphRun, origin: Origin = "bottom-left") -> BBox:
    """Return the glyph box of ``run`` in page coordinates.

    Extraction reports the baseline, so the box is pushed down by a fifth
    of the run height to cover descenders. For a top-left origin the
    anchor is the top edge instead of the bottom edge.
    """

    height = run.height if run.height and run.height > 0 else _font_height(run)
    if run.width is not None:
        width = max(0.0, float(run.width))
    else:
        width = estimate_width(run.text, _font_height(run) or height)
    if origin == "bottom-left":
        y = run.y - height * BASELINE_SHIFT
    else:
        y = run.y - height * (1.0 - BASELINE_SHIFT)
    return BBox(float(run.x), float(y), float(width), float(height))


# ---------------------------------------------------------------------------
# Token mode
# ---------------------------------------------------------------------------

def reconstruct_tokens(page: PageLayout) -> List[TextUnit]:
    """Split and merge the runs of ``page`` into word tokens."""

    tokens: List[TextUnit] = []
    current: Optional[TextUnit] = None

    def flush() -> None:
        nonlocal current
        if current is not None and current.text.strip():
            tokens.append(current)
        current = None

    for run in page.runs:
        if is_blank(run.text):
            flush()
            continue

        bbox = run_bbox(run, page.origin)
        parts = split_words(run.text)

        if len(parts) == 1:
            if run.text[0].isspace():
                flush()
            if current is None:
                current = TextUnit(parts[0], page.index, bbox)
            else:
                current = TextUnit(current.text + parts[0], page.index, current.bbox.union(bbox))
            if run.text[-1].isspace():
                flush()
        else:
            flush()
            approx_w = bbox.width / len(parts)
            for i, part in enumerate(parts):
                tokens.append(
                    TextUnit(
                        part,
                        page.index,
                        BBox(bbox.x + approx_w * i, bbox.y, approx_w, bbox.height),
                    )
                )

    flush()

    units = []
    for token in tokens:
        text = collapse_whitespace(token.text)
        if text:
            units.append(TextUnit(text, token.page_index, token.bbox))
    logger.debug("page %d: %d runs -> %d tokens", page.index, len(page.runs), len(units))
    return units


# ---------------------------------------------------------------------------
# Line mode
# ---------------------------------------------------------------------------

def _top_first(origin: Origin):
    if origin == "bottom-left":
        return lambda y: -y
    return lambda y: y


def _join_runs(runs: Sequence[GlyphRun], boxes: Sequence[BBox], join_gap: float) -> str:
    pieces: List[str] = []
    prev: Optional[BBox] = None
    for run, box in zip(runs, boxes):
        if prev is not None and box.x - prev.x1 > join_gap:
            if pieces and not pieces[-1][-1:].isspace() and not run.text[:1].isspace():
                pieces.append(" ")
        pieces.append(run.text)
        prev = box
    return collapse_whitespace("".join(pieces))


def reconstruct_lines(
    page: PageLayout,
    *,
    y_tolerance: float = Y_CLUSTER_TOLERANCE,
    join_gap: float = JOIN_GAP_THRESHOLD,
) -> List[TextUnit]:
    """Cluster the runs of ``page`` into visual lines ordered top to bottom."""

    order = _top_first(page.origin)
    placed = [(run, run_bbox(run, page.origin)) for run in page.runs if not is_blank(run.text)]
    placed.sort(key=lambda item: (order(item[1].y), item[1].x))

    clusters: List[List[tuple]] = []
    seed_y = 0.0
    for item in placed:
        if clusters and abs(item[1].y - seed_y) <= y_tolerance:
            clusters[-1].append(item)
        else:
            clusters.append([item])
            seed_y = item[1].y

    lines: List[TextUnit] = []
    for cluster in clusters:
        cluster.sort(key=lambda item: item[1].x)
        runs = [run for run, _ in cluster]
        boxes = [box for _, box in cluster]
        text = _join_runs(runs, boxes, join_gap)
        if not text:
            continue
        anchor_y = sum(box.y for box in boxes) / len(boxes)
        x0 = min(box.x for box in boxes)
        x1 = max(box.x1 for box in boxes)
        height = max(box.height for box in boxes)
        lines.append(
            TextUnit(text, page.index, BBox(x0, anchor_y, x1 - x0, height), tuple(runs))
        )

    lines.sort(key=lambda line: order(line.bbox.y))
    logger.debug("page %d: %d runs -> %d lines", page.index, len(page.runs), len(lines))
    return lines


def reconstruct_units(
    pages: Iterable[PageLayout],
    granularity: str = "token",
    *,
    y_tolerance: float = Y_CLUSTER_TOLERANCE,
    join_gap: float = JOIN_GAP_THRESHOLD,
) -> List[TextUnit]:
    """Reconstruct every page in order and concatenate the resulting units."""

    units: List[TextUnit] = []
    for page in pages:
        if granularity == "token":
            units.extend(reconstruct_tokens(page))
        elif granularity == "line-character":
            units.extend(reconstruct_lines(page, y_tolerance=y_tolerance, join_gap=join_gap))
        else:
            raise ValueError(f"Unknown granularity '{granularity}'")
    return units
