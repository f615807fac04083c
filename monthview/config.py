from __future__ import annotations

from dataclasses import dataclass, replace

from .layout.models import LayoutConfigError, RowMetrics, Weekday, coerce_weekday


@dataclass(frozen=True)
class LayoutSettings:
    """Configuration shared by every week row of a month view."""

    max_lanes: int = 2
    week_starts_on: Weekday = Weekday.MONDAY
    day_cell_min_height: float = 92.0
    lane_height: float = 18.0
    lane_spacing: float = 3.0
    day_header_height: float = 26.0
    clamp_to_month: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.max_lanes, bool) or not isinstance(self.max_lanes, int):
            raise LayoutConfigError(f"max_lanes must be an integer, got {self.max_lanes!r}")
        if self.max_lanes < 1:
            raise LayoutConfigError(f"max_lanes must be at least 1, got {self.max_lanes}")
        object.__setattr__(self, "week_starts_on", coerce_weekday(self.week_starts_on))
        # RowMetrics validates the pixel sizes.
        self.row_metrics()

    def row_metrics(self) -> RowMetrics:
        return RowMetrics(
            day_header_height=self.day_header_height,
            lane_height=self.lane_height,
            lane_spacing=self.lane_spacing,
            min_height=self.day_cell_min_height,
        )

    def with_overrides(self, **changes: object) -> "LayoutSettings":
        overrides = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **overrides)
