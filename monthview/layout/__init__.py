"""Pure month-view layout: grid, week segments and lane assignment."""

from .grid import build_month_grid
from .lanes import compare_segments, compute_week_row_layout, layout_week, overlaps_columns, segment_sort_key
from .measure import approximate_text_width, collect_two_line_keys, needs_two_lines
from .models import (
    CalendarEvent,
    LayoutConfigError,
    LayoutError,
    MonthGrid,
    PositionedSegment,
    RowMetrics,
    SegmentKey,
    WeekRowLayout,
    WeekSegment,
    Weekday,
    day_only,
    is_same_day,
)
from .segments import build_week_segments, group_segments_by_week

__all__ = [
    "CalendarEvent",
    "LayoutConfigError",
    "LayoutError",
    "MonthGrid",
    "PositionedSegment",
    "RowMetrics",
    "SegmentKey",
    "WeekRowLayout",
    "WeekSegment",
    "Weekday",
    "approximate_text_width",
    "build_month_grid",
    "build_week_segments",
    "collect_two_line_keys",
    "compare_segments",
    "compute_week_row_layout",
    "day_only",
    "group_segments_by_week",
    "is_same_day",
    "layout_week",
    "needs_two_lines",
    "overlaps_columns",
    "segment_sort_key",
]
