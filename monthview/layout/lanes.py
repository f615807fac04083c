from __future__ import annotations

import logging
from datetime import datetime
from typing import AbstractSet, List, Sequence

from .models import (
    DAYS_PER_WEEK,
    LayoutConfigError,
    PositionedSegment,
    RowMetrics,
    SegmentKey,
    WeekRowLayout,
    WeekSegment,
)

logger = logging.getLogger(__name__)

ROW_PADDING = 6.0
MIN_OVERFLOW_RESERVE = 18.0


def overlaps_columns(a: WeekSegment, b: WeekSegment) -> bool:
    return not (a.end_col < b.start_col or b.end_col < a.start_col)


def wall_time(value: datetime) -> datetime:
    """Local wall-clock time of ``value`` with any timezone dropped.

    Aware and naive datetimes cannot be ordered against each other, so lane
    ordering compares the time an event shows on its own calendar day.
    """

    return value.replace(tzinfo=None)


def _utc_offset_seconds(value: datetime) -> float:
    offset = value.utcoffset()
    return offset.total_seconds() if offset is not None else 0.0


def segment_sort_key(segment: WeekSegment) -> tuple:
    """Lane priority: multi-day first, then start time, column, longer span, title.

    Start times are compared as wall time. Equal wall times with different
    UTC offsets fall back to the offset, then the event id.
    """

    start = segment.event.start
    return (
        not segment.is_multi_day,
        wall_time(start),
        segment.start_col,
        -segment.span,
        segment.event.title,
        _utc_offset_seconds(start),
        segment.event.event_id,
    )


def compare_segments(a: WeekSegment, b: WeekSegment) -> int:
    key_a = segment_sort_key(a)
    key_b = segment_sort_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def layout_week(segments: Sequence[WeekSegment]) -> List[PositionedSegment]:
    """Assign lanes without a cap or promotion; every segment gets one lane."""

    lanes: List[List[WeekSegment]] = []
    positioned: List[PositionedSegment] = []

    for segment in sorted(segments, key=segment_sort_key):
        for index, lane in enumerate(lanes):
            if not any(overlaps_columns(other, segment) for other in lane):
                lane.append(segment)
                break
        else:
            lanes.append([segment])
            index = len(lanes) - 1
        positioned.append(PositionedSegment(segment=segment, lane=index, lane_span=1))

    return positioned


def compute_week_row_layout(
    segments: Sequence[WeekSegment],
    max_lanes: int,
    two_line_keys: AbstractSet[SegmentKey],
    metrics: RowMetrics,
) -> WeekRowLayout:
    """Compute lanes, overflow counts and height for one week row.

    Segments that do not fit within ``max_lanes`` are kept in the result with
    ``lane == max_lanes`` and counted in ``hidden_count_per_col``.
    """

    _check_max_lanes(max_lanes)
    if not isinstance(metrics, RowMetrics):
        raise LayoutConfigError(f"Expected RowMetrics, got {type(metrics)!r}")

    ordered = sorted(segments, key=segment_sort_key)
    promoted = _select_promotions(ordered, max_lanes, two_line_keys)

    lanes: List[List[WeekSegment]] = [[] for _ in range(max_lanes)]
    positioned: List[PositionedSegment] = []

    for segment in ordered:
        required = 2 if segment.key in promoted else 1
        lane_index = _first_free_lane(lanes, segment, required, max_lanes)
        if lane_index < max_lanes:
            for lane in lanes[lane_index : lane_index + required]:
                lane.append(segment)
        positioned.append(PositionedSegment(segment=segment, lane=lane_index, lane_span=required))

    hidden_count_per_col = [0] * DAYS_PER_WEEK
    used_lanes = 0
    for ps in positioned:
        if ps.is_hidden(max_lanes):
            for col in range(ps.segment.start_col, ps.segment.end_col + 1):
                hidden_count_per_col[col] += 1
        else:
            used_lanes = max(used_lanes, ps.lane + ps.lane_span)

    hidden_total = sum(1 for ps in positioned if ps.is_hidden(max_lanes))
    if hidden_total:
        logger.debug(
            "Week row hides %s of %s segments (max_lanes=%s)",
            hidden_total,
            len(positioned),
            max_lanes,
        )

    return WeekRowLayout(
        positioned=positioned,
        hidden_count_per_col=hidden_count_per_col,
        total_height=_row_height(metrics, used_lanes, max_lanes),
        max_lanes=max_lanes,
    )


def _check_max_lanes(max_lanes: int) -> None:
    if isinstance(max_lanes, bool) or not isinstance(max_lanes, int):
        raise LayoutConfigError(f"max_lanes must be an integer, got {max_lanes!r}")
    if max_lanes < 1:
        raise LayoutConfigError(f"max_lanes must be at least 1, got {max_lanes}")


def _select_promotions(
    ordered: Sequence[WeekSegment],
    max_lanes: int,
    two_line_keys: AbstractSet[SegmentKey],
) -> set[SegmentKey]:
    # An event counts once per column, however many segments it has there.
    events_by_col: List[set[str]] = [set() for _ in range(DAYS_PER_WEEK)]
    candidates_by_col: List[List[WeekSegment]] = [[] for _ in range(DAYS_PER_WEEK)]

    for segment in ordered:
        for col in range(segment.start_col, segment.end_col + 1):
            events_by_col[col].add(segment.event.event_id)
        if segment.is_single_column and segment.key in two_line_keys:
            candidates_by_col[segment.start_col].append(segment)

    promoted: set[SegmentKey] = set()
    for col in range(DAYS_PER_WEEK):
        spare = max_lanes - len(events_by_col[col])
        if spare <= 0 or not candidates_by_col[col]:
            continue
        candidates = sorted(candidates_by_col[col], key=lambda seg: wall_time(seg.event.start))
        for segment in candidates[:spare]:
            promoted.add(segment.key)
        logger.debug("Column %s promotes %s segment(s)", col, min(spare, len(candidates)))

    return promoted


def _first_free_lane(
    lanes: Sequence[Sequence[WeekSegment]],
    segment: WeekSegment,
    required: int,
    max_lanes: int,
) -> int:
    for start in range(max_lanes):
        if start + required > max_lanes:
            break
        if all(
            not any(overlaps_columns(other, segment) for other in lanes[lane])
            for lane in range(start, start + required)
        ):
            return start
    return max_lanes


def _row_height(metrics: RowMetrics, used_lanes: int, max_lanes: int) -> float:
    overflow_reserve = max(metrics.lane_height, MIN_OVERFLOW_RESERVE)
    min_for_used = metrics.day_header_height + metrics.lanes_height(used_lanes) + ROW_PADDING
    min_for_max = (
        metrics.day_header_height
        + metrics.lanes_height(max_lanes)
        + overflow_reserve
        + ROW_PADDING
    )
    return max(metrics.min_height, min_for_used, min_for_max)
