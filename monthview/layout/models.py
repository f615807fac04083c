from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import IntEnum
from typing import List, NamedTuple, Tuple

DAYS_PER_WEEK = 7


class LayoutError(Exception):
    """Base error for month layout issues."""


class LayoutConfigError(LayoutError, ValueError):
    """Raised when the caller passes an invalid layout configuration."""


class Weekday(IntEnum):
    """Day of week, numbered like ``date.weekday()``."""

    MONDAY = calendar.MONDAY
    TUESDAY = calendar.TUESDAY
    WEDNESDAY = calendar.WEDNESDAY
    THURSDAY = calendar.THURSDAY
    FRIDAY = calendar.FRIDAY
    SATURDAY = calendar.SATURDAY
    SUNDAY = calendar.SUNDAY


def coerce_weekday(value: Weekday | int) -> Weekday:
    if isinstance(value, bool) or not isinstance(value, int):
        raise LayoutConfigError(f"Week start must be a weekday, got {value!r}")
    try:
        return Weekday(value)
    except ValueError as exc:
        raise LayoutConfigError(f"Week start must be between 0 and 6, got {value!r}") from exc


def day_only(value: date) -> date:
    """Strip the time of day, keeping the calendar date."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected a date or datetime, got {type(value)!r}")


def is_same_day(a: date, b: date) -> bool:
    return day_only(a) == day_only(b)


def month_bounds(month: date) -> Tuple[date, date]:
    """Return the first and last calendar day of the month containing ``month``."""

    day = day_only(month)
    _, days_in_month = calendar.monthrange(day.year, day.month)
    return date(day.year, day.month, 1), date(day.year, day.month, days_in_month)


@dataclass(frozen=True)
class CalendarEvent:
    """An event as supplied by the caller. Never mutated by the layout code."""

    event_id: str
    title: str
    start: datetime
    end: datetime
    color: str | None = None
    is_all_day: bool = False

    @property
    def start_day(self) -> date:
        return day_only(self.start)

    @property
    def end_day(self) -> date:
        return day_only(self.end)


@dataclass(frozen=True)
class MonthGrid:
    """Visible window of a month view, split into rows of seven dates."""

    visible_start: date
    visible_end: date
    weeks: Tuple[Tuple[date, ...], ...]

    @property
    def week_count(self) -> int:
        return len(self.weeks)

    def contains(self, day: date) -> bool:
        return self.visible_start <= day_only(day) <= self.visible_end

    def week_span(self, week_index: int) -> Tuple[date, date]:
        first = self.visible_start + timedelta(days=week_index * DAYS_PER_WEEK)
        return first, first + timedelta(days=DAYS_PER_WEEK - 1)


class SegmentKey(NamedTuple):
    """Stable identity of a segment, independent of object identity."""

    event_id: str
    week_index: int
    start_col: int


@dataclass(frozen=True)
class WeekSegment:
    """The part of one event that falls inside a single week row.

    ``continues_left`` / ``continues_right`` describe the original event
    bounds, so a segment cut by the month clamp still reports that the event
    goes on beyond it.
    """

    event: CalendarEvent
    week_index: int
    start_col: int
    end_col: int
    continues_left: bool = False
    continues_right: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.start_col <= self.end_col < DAYS_PER_WEEK:
            raise ValueError(
                f"Invalid column range {self.start_col}..{self.end_col} for {self.event.event_id}"
            )

    @property
    def key(self) -> SegmentKey:
        return SegmentKey(self.event.event_id, self.week_index, self.start_col)

    @property
    def span(self) -> int:
        return self.end_col - self.start_col + 1

    @property
    def is_single_column(self) -> bool:
        return self.start_col == self.end_col

    @property
    def is_multi_day(self) -> bool:
        return (
            not self.is_single_column
            or self.continues_left
            or self.continues_right
            or not is_same_day(self.event.start, self.event.end)
        )


@dataclass(frozen=True)
class PositionedSegment:
    segment: WeekSegment
    lane: int
    lane_span: int = 1

    def is_hidden(self, max_lanes: int) -> bool:
        return self.lane >= max_lanes


@dataclass(frozen=True)
class RowMetrics:
    """Pixel sizes used to compute the height of a week row."""

    day_header_height: float
    lane_height: float
    lane_spacing: float
    min_height: float = 0.0

    def __post_init__(self) -> None:
        if self.lane_height <= 0:
            raise LayoutConfigError("lane_height must be positive")
        for name in ("day_header_height", "lane_spacing", "min_height"):
            if getattr(self, name) < 0:
                raise LayoutConfigError(f"{name} must be non-negative")

    def lanes_height(self, count: int) -> float:
        if count <= 0:
            return 0.0
        return count * self.lane_height + (count - 1) * self.lane_spacing


@dataclass(frozen=True)
class WeekRowLayout:
    """Lane assignment for one week row, ready to be drawn."""

    positioned: List[PositionedSegment]
    hidden_count_per_col: List[int]
    total_height: float
    max_lanes: int = field(default=1, kw_only=True)

    def visible(self) -> List[PositionedSegment]:
        return [ps for ps in self.positioned if not ps.is_hidden(self.max_lanes)]

    def hidden(self) -> List[PositionedSegment]:
        return [ps for ps in self.positioned if ps.is_hidden(self.max_lanes)]
