from __future__ import annotations

import logging
from datetime import date, timedelta

from .models import DAYS_PER_WEEK, MonthGrid, Weekday, coerce_weekday, day_only, month_bounds

logger = logging.getLogger(__name__)


def build_month_grid(month: date, week_starts_on: Weekday | int = Weekday.MONDAY) -> MonthGrid:
    """Build the visible grid for the month containing ``month``.

    The grid starts on the last ``week_starts_on`` day on or before the first
    of the month and ends on the day before the next ``week_starts_on`` after
    the last of the month. Dates are derived from ``date`` ordinals, so the
    result does not depend on the local timezone or DST transitions.
    """

    week_start = coerce_weekday(week_starts_on)
    first, last = month_bounds(day_only(month))

    delta = (first.weekday() - week_start) % DAYS_PER_WEEK
    end_delta = (week_start + DAYS_PER_WEEK - 1 - last.weekday()) % DAYS_PER_WEEK

    visible_start = first - timedelta(days=delta)
    visible_end = last + timedelta(days=end_delta)

    days_count = delta + last.day + end_delta
    weeks_count = days_count // DAYS_PER_WEEK

    weeks = tuple(
        tuple(
            visible_start + timedelta(days=week * DAYS_PER_WEEK + col)
            for col in range(DAYS_PER_WEEK)
        )
        for week in range(weeks_count)
    )

    logger.debug(
        "Built grid for %04d-%02d: %s .. %s (%s weeks)",
        first.year,
        first.month,
        visible_start,
        visible_end,
        weeks_count,
    )
    return MonthGrid(visible_start=visible_start, visible_end=visible_end, weeks=weeks)
