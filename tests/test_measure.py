from __future__ import annotations

from datetime import datetime

import pytest

from monthview.layout.measure import (
    approximate_text_width,
    available_title_width,
    collect_two_line_keys,
    needs_two_lines,
)
from monthview.layout.models import CalendarEvent, LayoutConfigError, SegmentKey, WeekSegment


def _char_count(text: str) -> float:
    return float(len(text))


def _segment(event_id: str, title: str, start_col: int, end_col: int, *, end_day: int | None = None):
    start = datetime(2026, 2, 2 + start_col, 9)
    end = datetime(2026, 2, end_day or 2 + end_col, 10)
    event = CalendarEvent(event_id=event_id, title=title, start=start, end=end)
    return WeekSegment(event=event, week_index=1, start_col=start_col, end_col=end_col)


def test_approximate_width_scales_with_length():
    assert approximate_text_width("abcd") == pytest.approx(26.0)
    assert approximate_text_width("abcd", char_width=10) == pytest.approx(40.0)


def test_available_width_covers_every_spanned_cell():
    segment = _segment("a", "title", 1, 3)

    assert available_title_width(segment, 100.0) == pytest.approx(288.0)
    assert available_title_width(segment, 100.0, padding=0) == pytest.approx(300.0)


def test_title_that_fits_does_not_need_two_lines():
    assert not needs_two_lines("Short", 10, _char_count)


def test_wrappable_overflowing_title_needs_two_lines():
    assert needs_two_lines("Team standup", 8, _char_count)


def test_single_long_word_does_not_benefit_from_wrapping():
    assert not needs_two_lines("Supercalifragilistic", 8, _char_count)
    assert not needs_two_lines("Very    Supercalifragilistic", 3, _char_count)


def test_collect_keys_measures_single_day_single_column_segments_only():
    wrapped = _segment("wrapped", "Quarterly planning review", 2, 2)
    short = _segment("short", "Gym", 3, 3)
    multi = _segment("multi", "Quarterly planning review", 4, 5)
    overnight = _segment("overnight", "Quarterly planning review", 0, 0, end_day=3)

    keys = collect_two_line_keys([wrapped, short, multi, overnight], cell_width=60.0)

    assert keys == {SegmentKey("wrapped", 1, 2)}


def test_collect_keys_uses_supplied_measure():
    segment = _segment("a", "two words", 0, 0)

    assert collect_two_line_keys([segment], cell_width=20.0, measure=_char_count) == {segment.key}
    assert collect_two_line_keys([segment], cell_width=30.0, measure=_char_count) == set()


@pytest.mark.parametrize("cell_width", [0, -5.0])
def test_collect_keys_rejects_non_positive_cell_width(cell_width):
    with pytest.raises(LayoutConfigError):
        collect_two_line_keys([], cell_width=cell_width)
