from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Sequence

from .models import (
    DAYS_PER_WEEK,
    CalendarEvent,
    MonthGrid,
    WeekSegment,
    month_bounds,
)

logger = logging.getLogger(__name__)


def build_week_segments(
    events: Iterable[CalendarEvent],
    grid: MonthGrid,
    month: date | None = None,
) -> List[WeekSegment]:
    """Split events into one segment per week row they touch.

    Events are clamped to the visible grid and, when ``month`` is given, to
    that month so they do not spill into the padding days of adjacent months.
    Continuation flags are computed from the unclamped event dates.
    """

    visible_start = grid.visible_start
    visible_end = grid.visible_end

    month_start: date | None = None
    month_end: date | None = None
    if month is not None:
        month_start, month_end = month_bounds(month)

    segments: List[WeekSegment] = []

    for event in events:
        start_day = event.start_day
        end_day = event.end_day

        if end_day < start_day:
            logger.debug("Skipping event %s: ends before it starts", event.event_id)
            continue
        if end_day < visible_start or start_day > visible_end:
            continue

        effective_start = max(start_day, visible_start)
        effective_end = min(end_day, visible_end)

        if month_start is not None and month_end is not None:
            if effective_end < month_start or effective_start > month_end:
                continue
            effective_start = max(effective_start, month_start)
            effective_end = min(effective_end, month_end)

        start_week = (effective_start - visible_start).days // DAYS_PER_WEEK
        end_week = (effective_end - visible_start).days // DAYS_PER_WEEK

        for week_index in range(start_week, end_week + 1):
            week_first, week_last = grid.week_span(week_index)
            seg_start = max(effective_start, week_first)
            seg_end = min(effective_end, week_last)
            if seg_end < seg_start:
                continue

            segments.append(
                WeekSegment(
                    event=event,
                    week_index=week_index,
                    start_col=(seg_start - week_first).days,
                    end_col=(seg_end - week_first).days,
                    continues_left=start_day < seg_start,
                    continues_right=end_day > seg_end,
                )
            )

    return segments


def group_segments_by_week(
    segments: Sequence[WeekSegment],
    week_count: int,
) -> List[List[WeekSegment]]:
    """Bucket segments by week index; every week gets a (possibly empty) list."""

    buckets: List[List[WeekSegment]] = [[] for _ in range(week_count)]
    for segment in segments:
        if not 0 <= segment.week_index < week_count:
            raise ValueError(
                f"Segment for {segment.event.event_id} is outside the grid (week {segment.week_index})"
            )
        buckets[segment.week_index].append(segment)
    return buckets
