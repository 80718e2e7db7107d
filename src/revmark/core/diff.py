"""Alignment of the unit sequences of two revisions."""
from __future__ import annotations

import difflib
import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import diff_match_patch as dmp_module

from .types import AlignmentSegment, CharRange, LinePairing, TextUnit

logger = logging.getLogger(__name__)

Y_WEIGHT = 3.0
LENGTH_WEIGHT = 0.2

_DMP_KIND = {-1: "removed", 0: "unchanged", 1: "added"}


def _align_strings(text_a: str, text_b: str) -> List[AlignmentSegment]:
    dmp = dmp_module.diff_match_patch()
    # no deadline, the result must not depend on machine speed
    dmp.Diff_Timeout = 0
    diffs = dmp.diff_main(text_a, text_b, False)
    return [AlignmentSegment(_DMP_KIND[op], text) for op, text in diffs if text]


def _align_sequences(seq_a: Sequence, seq_b: Sequence) -> List[AlignmentSegment]:
    matcher = difflib.SequenceMatcher(None, seq_a, seq_b, autojunk=False)
    segments: List[AlignmentSegment] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            segments.append(AlignmentSegment("unchanged", tuple(seq_b[j1:j2])))
            continue
        if tag in ("delete", "replace"):
            segments.append(AlignmentSegment("removed", tuple(seq_a[i1:i2])))
        if tag in ("insert", "replace"):
            segments.append(AlignmentSegment("added", tuple(seq_b[j1:j2])))
    return segments


def align(seq_a: Sequence, seq_b: Sequence) -> List[AlignmentSegment]:
    """Classify ``seq_b`` against ``seq_a`` into ordered diff segments.

    Strings are diffed character by character with diff-match-patch, any
    other sequence element by element with :class:`difflib.SequenceMatcher`.
    Concatenating the ``unchanged`` and ``added`` values in order gives back
    ``seq_b``; ``unchanged`` and ``removed`` give back ``seq_a``.
    """

    if not seq_a and not seq_b:
        return []
    if not seq_a:
        return [AlignmentSegment("added", seq_b if isinstance(seq_b, str) else tuple(seq_b))]
    if not seq_b:
        return [AlignmentSegment("removed", seq_a if isinstance(seq_a, str) else tuple(seq_a))]
    if isinstance(seq_a, str) and isinstance(seq_b, str):
        return _align_strings(seq_a, seq_b)
    return _align_sequences(seq_a, seq_b)


def added_ranges(segments: Sequence[AlignmentSegment]) -> List[Tuple[int, int]]:
    """Return ``(start, length)`` slices of the target sequence that were added."""

    ranges: List[Tuple[int, int]] = []
    idx = 0
    for seg in segments:
        if seg.kind == "added":
            ranges.append((idx, len(seg)))
            idx += len(seg)
        elif seg.kind == "unchanged":
            idx += len(seg)
    return ranges


def added_indexes(keys_a: Sequence[str], keys_b: Sequence[str]) -> List[int]:
    """Indexes into ``keys_b`` of the keys absent from ``keys_a``."""

    indexes: List[int] = []
    for start, length in added_ranges(align(keys_a, keys_b)):
        indexes.extend(range(start, start + length))
    logger.debug("%d of %d keys added", len(indexes), len(keys_b))
    return indexes


# ---------------------------------------------------------------------------
# Line mode
# ---------------------------------------------------------------------------

def _pair_score(source: TextUnit, target: TextUnit) -> float:
    return Y_WEIGHT * abs(source.bbox.y - target.bbox.y) + LENGTH_WEIGHT * abs(
        len(source.text) - len(target.text)
    )


def pair_lines(source: Sequence[TextUnit], target: Sequence[TextUnit]) -> List[LinePairing]:
    """Greedily pair each target line with the closest unclaimed source line.

    Target lines are visited in document order; a claimed source line is
    never offered again. Only lines of the same page compete.
    """

    by_page: Dict[int, List[int]] = defaultdict(list)
    for i, line in enumerate(source):
        by_page[line.page_index].append(i)

    claimed = set()
    pairings: List[LinePairing] = []
    for t_idx, line in enumerate(target):
        best: Optional[int] = None
        best_score = 0.0
        for s_idx in by_page.get(line.page_index, ()):
            if s_idx in claimed:
                continue
            score = _pair_score(source[s_idx], line)
            if best is None or score < best_score:
                best = s_idx
                best_score = score
        if best is not None:
            claimed.add(best)
        pairings.append(LinePairing(t_idx, best))
    return pairings


def added_char_ranges(
    source: Sequence[TextUnit],
    target: Sequence[TextUnit],
    pairings: Sequence[LinePairing],
    key: Callable[[str], str] = str,
) -> List[CharRange]:
    """Character spans of each target line that its paired source line lacks."""

    ranges: List[CharRange] = []
    for pairing in pairings:
        text_b = key(target[pairing.target_index].text)
        text_a = key(source[pairing.source_index].text) if pairing.source_index is not None else ""
        if text_a == text_b:
            continue
        for start, length in added_ranges(align(text_a, text_b)):
            ranges.append(CharRange(pairing.target_index, start, start + length))
    logger.debug("%d added character ranges over %d lines", len(ranges), len(target))
    return ranges
