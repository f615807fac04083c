from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import AbstractSet, Callable, Iterable, List, Sequence

from ..config import LayoutSettings
from .grid import build_month_grid
from .lanes import compute_week_row_layout
from .models import (
    DAYS_PER_WEEK,
    CalendarEvent,
    MonthGrid,
    PositionedSegment,
    RowMetrics,
    SegmentKey,
    WeekRowLayout,
    WeekSegment,
)
from .segments import build_week_segments, group_segments_by_week

logger = logging.getLogger(__name__)

KeyMeasure = Callable[[Sequence[WeekSegment]], AbstractSet[SegmentKey]]

# Horizontal inset of an event bar inside its cells.
BAR_INSET = 2.0


@dataclass(frozen=True)
class BarRect:
    """Pixel rectangle of a visible event bar, relative to its week row."""

    segment: WeekSegment
    left: float
    top: float
    width: float
    height: float
    max_lines: int = 1


@dataclass(frozen=True)
class MonthLayout:
    grid: MonthGrid
    rows: List[WeekRowLayout]
    settings: LayoutSettings

    def segments(self) -> List[PositionedSegment]:
        return [ps for row in self.rows for ps in row.positioned]


def build_month_layout(
    month: date,
    events: Iterable[CalendarEvent],
    settings: LayoutSettings | None = None,
    two_line_keys: AbstractSet[SegmentKey] | None = None,
    measure_keys: KeyMeasure | None = None,
) -> MonthLayout:
    """Lay out a whole month: grid, per-week segments and lanes for every row.

    ``measure_keys`` receives the month's segments and returns more two-line
    keys; they are merged with ``two_line_keys``.
    """

    settings = settings or LayoutSettings()

    grid = build_month_grid(month, settings.week_starts_on)
    segments = build_week_segments(
        events,
        grid,
        month=month if settings.clamp_to_month else None,
    )
    keys = set(two_line_keys or ())
    if measure_keys is not None:
        keys.update(measure_keys(segments))
    metrics = settings.row_metrics()

    rows = [
        compute_week_row_layout(week_segments, settings.max_lanes, keys, metrics)
        for week_segments in group_segments_by_week(segments, grid.week_count)
    ]

    logger.debug(
        "Laid out %s segments over %s weeks (%s hidden)",
        len(segments),
        grid.week_count,
        sum(len(row.hidden()) for row in rows),
    )
    return MonthLayout(grid=grid, rows=rows, settings=settings)


def bar_geometry(
    positioned: PositionedSegment,
    row_width: float,
    metrics: RowMetrics,
    max_lanes: int,
) -> BarRect:
    if positioned.is_hidden(max_lanes):
        raise ValueError(f"Segment of {positioned.segment.event.event_id} is hidden and has no bar")
    if row_width <= 0:
        raise ValueError("row_width must be positive")

    segment = positioned.segment
    cell_width = row_width / DAYS_PER_WEEK
    left = segment.start_col * cell_width + BAR_INSET
    width = row_width - left - (DAYS_PER_WEEK - 1 - segment.end_col) * cell_width - BAR_INSET
    top = metrics.day_header_height + positioned.lane * (metrics.lane_height + metrics.lane_spacing)
    return BarRect(
        segment=segment,
        left=left,
        top=top,
        width=width,
        height=metrics.lanes_height(positioned.lane_span),
        max_lines=positioned.lane_span,
    )


def visible_bars(row: WeekRowLayout, row_width: float, metrics: RowMetrics) -> List[BarRect]:
    return [bar_geometry(ps, row_width, metrics, row.max_lanes) for ps in row.visible()]
