import pytest

from pug.tui.scrollbar import SCROLLBAR_THUMB, SCROLLBAR_TRACK, scrollbar


@pytest.mark.parametrize(
    "height, total, visible, offset",
    [(10, 100, 10, 0), (10, 100, 10, 50), (20, 37, 20, 17), (5, 1000, 5, 500)],
)
def test_line_count_matches_height(height, total, visible, offset):
    lines = scrollbar(height, total, visible, offset).split("\n")
    assert len(lines) == height
    assert set(lines) <= {SCROLLBAR_THUMB, SCROLLBAR_TRACK}


def test_thumb_at_top_when_not_scrolled():
    lines = scrollbar(10, 100, 20, 0).split("\n")
    assert lines[0] == SCROLLBAR_THUMB
    assert lines[-1] == SCROLLBAR_TRACK


def test_thumb_at_bottom_when_scrolled_to_end():
    lines = scrollbar(10, 100, 20, 80).split("\n")
    assert lines[-1] == SCROLLBAR_THUMB
    assert lines[0] == SCROLLBAR_TRACK


def test_thumb_is_at_least_one_line():
    lines = scrollbar(5, 10_000, 1, 0).split("\n")
    assert lines.count(SCROLLBAR_THUMB) == 1


def test_thumb_is_contiguous():
    bar = scrollbar(20, 60, 20, 25)
    thumbs = bar.replace("\n", "").strip(SCROLLBAR_TRACK)
    assert thumbs and set(thumbs) == {SCROLLBAR_THUMB}


def test_all_content_visible_fills_track():
    assert scrollbar(5, 5, 5, 0) == "\n".join([SCROLLBAR_THUMB] * 5)