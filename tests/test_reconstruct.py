import pytest

from revmark.core.reconstruct import (
    estimate_width,
    reconstruct_lines,
    reconstruct_tokens,
    reconstruct_units,
    run_bbox,
)
from revmark.core.types import GlyphRun, PageLayout


def _run(text, x, y, width=None, size=10.0, page=0):
    return GlyphRun(text, (size, 0.0, 0.0, size, x, y), width, size, page)


def _page(runs, index=0, origin="bottom-left"):
    return PageLayout(index, 600.0, 800.0, runs, origin)


def test_run_bbox_shifts_baseline_down():
    box = run_bbox(_run("abc", 10, 100, width=20))
    assert box.x == 10
    assert box.y == pytest.approx(98.0)
    assert box.width == 20
    assert box.height == 10


def test_run_bbox_top_left_origin_anchors_top_edge():
    box = run_bbox(_run("abc", 10, 100, width=20), origin="top-left")
    assert box.y == pytest.approx(92.0)
    assert box.y1 == pytest.approx(102.0)


def test_missing_width_is_estimated_wider_for_cjk():
    latin = run_bbox(_run("abcd", 0, 0))
    hangul = run_bbox(_run("가나다라", 0, 0))
    assert latin.width == pytest.approx(estimate_width("abcd", 10))
    assert latin.width == pytest.approx(20.0)
    assert hangul.width > latin.width


def test_multi_word_run_splits_width_evenly():
    units = reconstruct_tokens(_page([_run("foo bar baz", 30, 100, width=90)]))

    assert [u.text for u in units] == ["foo", "bar", "baz"]
    for unit in units:
        assert unit.bbox.width == pytest.approx(30.0)
    assert units[0].bbox.x == pytest.approx(30.0)
    assert units[1].bbox.x == pytest.approx(units[0].bbox.x1)
    assert units[2].bbox.x == pytest.approx(units[1].bbox.x1)


def test_single_word_runs_are_joined_into_one_token():
    runs = [_run("Hel", 10, 100, width=15), _run("lo", 25, 101, width=10)]
    units = reconstruct_tokens(_page(runs))

    assert [u.text for u in units] == ["Hello"]
    assert units[0].bbox.x == 10
    assert units[0].bbox.x1 == pytest.approx(35.0)
    assert units[0].bbox.y == pytest.approx(98.0)
    assert units[0].bbox.y1 == pytest.approx(109.0)


def test_whitespace_run_closes_token():
    runs = [_run("Hello", 10, 100, width=25), _run(" ", 35, 100, width=3), _run("world", 38, 100, width=25)]
    units = reconstruct_tokens(_page(runs))
    assert [u.text for u in units] == ["Hello", "world"]


def test_end_of_line_marker_closes_token():
    runs = [_run("end", 10, 100, width=15), _run("", 25, 100, width=0), _run("next", 10, 80, width=20)]
    units = reconstruct_tokens(_page(runs))
    assert [u.text for u in units] == ["end", "next"]


def test_multi_word_run_flushes_open_token():
    runs = [_run("a", 0, 100, width=5), _run("b c", 5, 100, width=10)]
    units = reconstruct_tokens(_page(runs))
    assert [u.text for u in units] == ["a", "b", "c"]


def test_blank_runs_never_produce_units():
    runs = [_run("   ", 0, 100, width=5), _run("\t", 5, 100, width=5)]
    assert reconstruct_tokens(_page(runs)) == []
    assert reconstruct_lines(_page(runs)) == []


def test_lines_join_with_space_only_on_wide_gaps():
    runs = [
        _run("cat", 30, 100.5, width=15),
        _run("The", 10, 100, width=15),
        _run("s", 45.5, 100, width=5),
    ]
    lines = reconstruct_lines(_page(runs))

    assert len(lines) == 1
    line = lines[0]
    assert line.text == "The cats"
    assert line.bbox.x == 10
    assert line.bbox.x1 == pytest.approx(50.5)
    assert line.bbox.y == pytest.approx((98.0 + 98.5 + 98.0) / 3)
    assert [r.text for r in line.runs] == ["The", "cat", "s"]


def test_lines_are_ordered_top_to_bottom():
    runs = [_run("lower", 10, 100, width=20), _run("upper", 10, 700, width=20)]

    bottom_left = reconstruct_lines(_page(runs))
    assert [line.text for line in bottom_left] == ["upper", "lower"]

    top_left = reconstruct_lines(_page(runs, origin="top-left"))
    assert [line.text for line in top_left] == ["lower", "upper"]


def test_line_tolerance_is_configurable():
    runs = [_run("a", 10, 100, width=5), _run("b", 20, 104, width=5)]
    assert len(reconstruct_lines(_page(runs))) == 2
    assert len(reconstruct_lines(_page(runs), y_tolerance=5.0)) == 1


def test_reconstruct_units_concatenates_pages_in_order():
    pages = [
        _page([_run("one", 0, 100, width=15, page=0)], index=0),
        _page([_run("two", 0, 100, width=15, page=1)], index=1),
    ]
    units = reconstruct_units(pages, "token")
    assert [(u.text, u.page_index) for u in units] == [("one", 0), ("two", 1)]


def test_reconstruct_units_rejects_unknown_granularity():
    with pytest.raises(ValueError):
        reconstruct_units([_page([])], "paragraph")


def test_reconstruction_is_deterministic():
    runs = [_run("b", 20, 100, width=5), _run("a", 10, 100, width=5), _run("c", 10, 50, width=5)]
    first = reconstruct_lines(_page(runs))
    second = reconstruct_lines(_page(list(runs)))
    assert first == second
