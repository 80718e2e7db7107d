"""End-to-end comparison: extract, align, synthesize and paint added text."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .core.diff import added_char_ranges, added_indexes, pair_lines
from .core.extraction import extract_layout
from .core.highlight import coalesce_boxes, synthesize_char_boxes, synthesize_token_boxes
from .core.reconstruct import reconstruct_units
from .core.types import HighlightBox, PageLayout, PageRect, TextUnit
from .errors import CancelledError
from .overlay import make_annotation_style, render_highlights
from .presets import HighlightOptions
from .utils.normalize import comparison_key

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class HighlightResult:
    """Outcome of :func:`diff_and_highlight`."""

    pdf_bytes: bytes
    boxes: List[PageRect] = field(default_factory=list)
    added_texts: List[str] = field(default_factory=list)
    old_unit_count: int = 0
    new_unit_count: int = 0

    @property
    def has_differences(self) -> bool:
        return bool(self.boxes)

    def to_dict(self) -> dict:
        return {
            "has_differences": self.has_differences,
            "old_units": self.old_unit_count,
            "new_units": self.new_unit_count,
            "added": list(self.added_texts),
            "boxes": [box.to_dict() for box in self.boxes],
        }


def _key_function(options: HighlightOptions) -> Callable[[str], str]:
    return partial(
        comparison_key,
        fold_case=options.fold_case,
        fold_diacritics=options.fold_diacritics,
        fold_width=options.fold_width,
    )


def _extract_units(
    data: bytes,
    name: str,
    options: HighlightOptions,
    cancel_callback: Optional[Callable[[], bool]],
) -> Tuple[List[PageLayout], List[TextUnit]]:
    pages = extract_layout(data, name=name, cancel_callback=cancel_callback)
    units = reconstruct_units(
        pages,
        options.granularity,
        y_tolerance=options.y_cluster_tolerance,
        join_gap=options.join_gap_threshold,
    )
    logger.info("%s PDF: %d pages, %d units", name, len(pages), len(units))
    return pages, units


def synthesize_boxes(
    old_units: Sequence[TextUnit],
    new_units: Sequence[TextUnit],
    new_pages: Sequence[PageLayout],
    options: HighlightOptions,
) -> List[HighlightBox]:
    """Align the two unit sequences and return boxes for what ``new`` adds."""

    key = _key_function(options)
    if options.granularity == "token":
        indexes = added_indexes([key(u.text) for u in old_units], [key(u.text) for u in new_units])
        logger.info("added tokens: %d", len(indexes))
        boxes = synthesize_token_boxes(new_units, indexes, new_pages, padding=options.padding)
    else:
        pairings = pair_lines(old_units, new_units)
        ranges = added_char_ranges(old_units, new_units, pairings, key)
        logger.info("added character ranges: %d", len(ranges))
        boxes = synthesize_char_boxes(
            new_units,
            ranges,
            new_pages,
            key=key,
            padding=options.padding,
            min_width=options.min_char_box_width,
            min_height=options.min_line_height,
        )
    if options.coalesce:
        boxes = coalesce_boxes(
            boxes, y_tolerance=options.y_cluster_tolerance, gap=options.merge_gap
        )
    return boxes


def diff_and_highlight(
    old_pdf: BytesLike,
    new_pdf: BytesLike,
    options: Optional[HighlightOptions] = None,
    *,
    progress_callback: Optional[Callable[[float], None]] = None,
    cancel_callback: Optional[Callable[[], bool]] = None,
) -> HighlightResult:
    """Highlight on ``new_pdf`` the text that ``old_pdf`` does not contain.

    Parameters
    ----------
    old_pdf, new_pdf : bytes-like
        Raw PDF bytes of the baseline and the revised document.
    options : HighlightOptions, optional
        Granularity, tolerances and overlay styling. Defaults to token mode.
    progress_callback : callable, optional
        Called with a ``0-100`` progress percentage.
    cancel_callback : callable, optional
        Returning ``True`` aborts with :class:`CancelledError`.

    Returns
    -------
    HighlightResult
        When nothing was added ``has_differences`` is ``False`` and
        ``pdf_bytes`` is the revised document untouched.
    """

    options = options or HighlightOptions()

    def report(value: float) -> None:
        if progress_callback:
            progress_callback(value)

    def check_cancel() -> None:
        if cancel_callback and cancel_callback():
            raise CancelledError()

    # every collaborator gets its own copy of the input
    old_for_extract = bytes(old_pdf)
    new_for_extract = bytes(new_pdf)
    new_for_render = bytes(new_pdf)

    report(0)
    # PyMuPDF is not thread safe, both documents are read on this thread
    _, old_units = _extract_units(old_for_extract, "old", options, cancel_callback)
    report(25)
    new_pages, new_units = _extract_units(new_for_extract, "new", options, cancel_callback)
    report(50)
    check_cancel()

    boxes = synthesize_boxes(old_units, new_units, new_pages, options)
    report(80)
    check_cancel()

    if not boxes:
        logger.info("no added text found")
        report(100)
        return HighlightResult(
            pdf_bytes=new_for_render,
            old_unit_count=len(old_units),
            new_unit_count=len(new_units),
        )

    style = make_annotation_style(
        options.highlight_color,
        fill_opacity=options.highlight_opacity,
        stroke_width=options.border_width,
        stroke_color=options.border_color,
    )
    report(90)
    out_bytes, rects = render_highlights(new_for_render, boxes, style)
    report(100)
    if not rects:
        logger.info("all highlight boxes fell outside the revised pages")
        return HighlightResult(
            pdf_bytes=new_for_render,
            old_unit_count=len(old_units),
            new_unit_count=len(new_units),
        )
    return HighlightResult(
        pdf_bytes=out_bytes,
        boxes=rects,
        added_texts=[rect.text for rect in rects],
        old_unit_count=len(old_units),
        new_unit_count=len(new_units),
    )
