import pytest

from revmark.core.highlight import (
    char_range_bbox,
    coalesce_boxes,
    synthesize_char_boxes,
    synthesize_token_boxes,
)
from revmark.core.types import BBox, CharRange, GlyphRun, HighlightBox, PageLayout, TextUnit

PAGE = PageLayout(0, 612.0, 792.0, (), "bottom-left")


def _box(x, y, w=10.0, h=10.0, page=0):
    return HighlightBox(page, BBox(x, y, w, h), (612.0, 792.0))


def _line(text, x, y, width, run_height=10.0):
    run = GlyphRun(text, (run_height, 0.0, 0.0, run_height, x, y), width, run_height, 0)
    return TextUnit(text, 0, BBox(x, y - run_height * 0.2, width, run_height), (run,))


def test_token_boxes_are_padded():
    units = [
        TextUnit("Hello", 0, BBox(10, 100, 30, 10)),
        TextUnit("brave", 0, BBox(45, 100, 30, 10)),
    ]
    boxes = synthesize_token_boxes(units, [1], [PAGE], padding=1.0)

    assert len(boxes) == 1
    assert boxes[0].bbox == BBox(44, 99, 32, 12)
    assert boxes[0].viewport == (612.0, 792.0)
    assert boxes[0].text == "brave"


def test_token_boxes_ignore_out_of_range_indexes():
    units = [TextUnit("a", 0, BBox(0, 0, 5, 5))]
    assert synthesize_token_boxes(units, [3, -1], [PAGE]) == []


def test_char_range_maps_proportionally():
    line = _line("The black cat sat.", 100, 500, 190)
    length = len(line.text)
    box = char_range_bbox(line, 4, 10, length)

    assert box.x == pytest.approx(100 + 190 * 4 / length)
    assert box.width == pytest.approx(190 * 6 / length)
    assert box.y == line.bbox.y
    assert box.height == pytest.approx(10.0)


def test_char_boxes_respect_minimum_sizes():
    line = _line("abcdefghij", 0, 500, 10, run_height=4.0)
    boxes = synthesize_char_boxes([line], [CharRange(0, 3, 4)], [PAGE])

    assert boxes[0].bbox.width == pytest.approx(2.0)
    assert boxes[0].bbox.height == pytest.approx(8.0)
    assert boxes[0].text == "d"


def test_char_boxes_from_scenario_line():
    text = "The black cat sat."
    line = _line(text, 100, 500, 180)
    boxes = synthesize_char_boxes([line], [CharRange(0, 4, 10)], [PAGE])

    assert len(boxes) == 1
    assert boxes[0].bbox.x == pytest.approx(100 + 180 * 4 / len(text))
    assert boxes[0].bbox.width == pytest.approx(180 * 6 / len(text))
    assert boxes[0].text == "black "


def test_coalesce_merges_neighbours_on_same_line():
    boxes = [_box(34, 100), _box(10, 101), _box(22, 100.5, h=12)]
    merged = coalesce_boxes(boxes)

    assert len(merged) == 1
    assert merged[0].bbox.x == 10
    assert merged[0].bbox.x1 == 44
    assert merged[0].bbox.y == 100
    assert merged[0].bbox.height == 12


def test_coalesce_keeps_distant_boxes_apart():
    boxes = [_box(10, 100), _box(40, 100), _box(10, 150), _box(10, 100, page=1)]
    merged = coalesce_boxes(boxes)
    assert len(merged) == 4
    assert [b.page_index for b in merged] == [0, 0, 0, 1]


def test_coalesce_is_idempotent():
    boxes = [
        _box(10, 100),
        _box(21, 101),
        _box(33, 102.4),
        _box(80, 100),
        _box(10, 103),
        _box(15, 106),
        _box(5, 300, page=1),
        _box(14, 300, page=1),
    ]
    once = coalesce_boxes(boxes)
    twice = coalesce_boxes(once)
    assert twice == once


def test_coalesce_empty():
    assert coalesce_boxes([]) == []
