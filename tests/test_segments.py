from __future__ import annotations

from datetime import date, datetime

import pytest

from monthview.layout.grid import build_month_grid
from monthview.layout.models import CalendarEvent, WeekSegment
from monthview.layout.segments import build_week_segments, group_segments_by_week

FEBRUARY = date(2026, 2, 1)


def _event(event_id: str, start: date, end: date, title: str | None = None) -> CalendarEvent:
    return CalendarEvent(
        event_id=event_id,
        title=title or event_id,
        start=datetime(start.year, start.month, start.day, 9),
        end=datetime(end.year, end.month, end.day, 10),
    )


@pytest.fixture
def grid():
    return build_month_grid(FEBRUARY)


def test_single_day_event_produces_one_single_column_segment(grid):
    segments = build_week_segments([_event("a", date(2026, 2, 10), date(2026, 2, 10))], grid)

    assert len(segments) == 1
    segment = segments[0]
    assert segment.week_index == 2
    assert segment.start_col == segment.end_col == 1
    assert not segment.continues_left
    assert not segment.continues_right


def test_event_spanning_two_weeks_is_split_with_continuation_flags(grid):
    segments = build_week_segments([_event("a", date(2026, 2, 2), date(2026, 2, 9))], grid)

    assert len(segments) == 2
    first, second = segments
    assert (first.week_index, first.start_col, first.end_col) == (1, 0, 6)
    assert first.continues_right
    assert not first.continues_left
    assert (second.week_index, second.start_col, second.end_col) == (2, 0, 0)
    assert second.continues_left
    assert not second.continues_right


def test_multi_week_event_flags_all_inner_edges(grid):
    segments = build_week_segments([_event("a", date(2026, 2, 2), date(2026, 2, 25))], grid)

    assert [segment.week_index for segment in segments] == [1, 2, 3, 4]
    assert [segment.continues_right for segment in segments] == [True, True, True, False]
    assert [segment.continues_left for segment in segments] == [False, True, True, True]
    assert segments[-1].end_col == 2


def test_event_covering_whole_grid_yields_segment_per_week(grid):
    segments = build_week_segments([_event("a", date(2026, 1, 1), date(2026, 3, 31))], grid)

    assert len(segments) == 5
    assert all(segment.start_col == 0 and segment.end_col == 6 for segment in segments)
    assert all(segment.continues_left and segment.continues_right for segment in segments)


def test_events_outside_visible_window_are_dropped(grid):
    events = [
        _event("before", date(2025, 12, 1), date(2026, 1, 25)),
        _event("after", date(2026, 3, 2), date(2026, 3, 10)),
    ]

    assert build_week_segments(events, grid) == []


def test_event_ending_before_it_starts_yields_nothing(grid):
    event = _event("backwards", date(2026, 2, 12), date(2026, 2, 10))

    assert build_week_segments([event], grid) == []


def test_empty_event_list_produces_no_segments(grid):
    assert build_week_segments([], grid) == []


def test_month_clamp_keeps_original_continuation_flags(grid):
    event = _event("a", date(2026, 1, 27), date(2026, 2, 3))

    clamped = build_week_segments([event], grid, month=FEBRUARY)

    assert [(s.week_index, s.start_col, s.end_col) for s in clamped] == [(0, 6, 6), (1, 0, 1)]
    assert clamped[0].continues_left
    assert clamped[0].continues_right
    assert clamped[1].continues_left
    assert not clamped[1].continues_right


def test_without_month_clamp_padding_days_are_used(grid):
    event = _event("a", date(2026, 1, 27), date(2026, 2, 3))

    segments = build_week_segments([event], grid)

    assert [(s.week_index, s.start_col, s.end_col) for s in segments] == [(0, 1, 6), (1, 0, 1)]
    assert not segments[0].continues_left


def test_event_only_in_padding_days_disappears_with_month_clamp(grid):
    event = _event("a", date(2026, 1, 27), date(2026, 1, 28))

    assert build_week_segments([event], grid, month=FEBRUARY) == []
    assert len(build_week_segments([event], grid)) == 1


def test_clamped_segments_stay_inside_the_month(grid):
    event = _event("a", date(2026, 1, 20), date(2026, 3, 20))

    segments = build_week_segments([event], grid, month=FEBRUARY)

    for segment in segments:
        week = grid.weeks[segment.week_index]
        assert week[segment.start_col].month == 2
        assert week[segment.end_col].month == 2


def test_time_of_day_is_ignored_when_splitting():
    grid = build_month_grid(FEBRUARY)
    event = CalendarEvent(
        event_id="late",
        title="Late night",
        start=datetime(2026, 2, 10, 23, 30),
        end=datetime(2026, 2, 11, 0, 15),
    )

    (segment,) = build_week_segments([event], grid)

    assert (segment.start_col, segment.end_col) == (1, 2)


def test_multiple_events_on_same_day_each_get_a_segment(grid):
    day = date(2026, 2, 18)
    events = [_event(name, day, day) for name in ("a", "b", "c")]

    segments = build_week_segments(events, grid)

    assert len(segments) == 3
    assert {segment.week_index for segment in segments} == {3}
    assert {segment.start_col for segment in segments} == {2}


def test_group_segments_by_week_returns_every_week(grid):
    events = [
        _event("a", date(2026, 2, 2), date(2026, 2, 9)),
        _event("b", date(2026, 2, 18), date(2026, 2, 18)),
    ]

    buckets = group_segments_by_week(build_week_segments(events, grid), grid.week_count)

    assert len(buckets) == 5
    assert [len(bucket) for bucket in buckets] == [0, 1, 1, 1, 0]


def test_group_segments_rejects_out_of_grid_segment():
    event = _event("a", date(2026, 2, 2), date(2026, 2, 2))
    segment = WeekSegment(event=event, week_index=7, start_col=0, end_col=0)

    with pytest.raises(ValueError):
        group_segments_by_week([segment], 5)


def test_segment_rejects_inverted_columns():
    event = _event("a", date(2026, 2, 2), date(2026, 2, 2))

    with pytest.raises(ValueError):
        WeekSegment(event=event, week_index=0, start_col=4, end_col=2)
