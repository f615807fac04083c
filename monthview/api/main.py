"""REST API exposing the month layout engine to rendering clients."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Sequence

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field, model_validator

from ..config import LayoutSettings
from ..layout.measure import approximate_text_width, collect_two_line_keys
from ..layout.models import (
    CalendarEvent,
    LayoutConfigError,
    PositionedSegment,
    SegmentKey,
    WeekSegment,
)
from ..layout.month import KeyMeasure, MonthLayout, bar_geometry, build_month_layout

logger = logging.getLogger(__name__)


class EventPayload(BaseModel):
    event_id: str = Field(min_length=1)
    title: str = ""
    start: datetime
    end: datetime
    color: Optional[str] = None
    is_all_day: bool = False

    def build_event(self) -> CalendarEvent:
        return CalendarEvent(
            event_id=self.event_id,
            title=self.title,
            start=self.start,
            end=self.end,
            color=self.color,
            is_all_day=self.is_all_day,
        )


class SegmentKeyPayload(BaseModel):
    event_id: str = Field(min_length=1)
    week_index: int = Field(ge=0)
    start_col: int = Field(ge=0, le=6)

    def build_key(self) -> SegmentKey:
        return SegmentKey(self.event_id, self.week_index, self.start_col)


class MonthLayoutRequest(BaseModel):
    """Everything needed to lay out one month.

    Layout overrides left unset fall back to the service defaults.
    """

    month: date
    events: List[EventPayload] = Field(default_factory=list)
    max_lanes: Optional[int] = None
    week_starts_on: Optional[int] = None
    clamp_to_month: Optional[bool] = None
    lane_height: Optional[float] = None
    lane_spacing: Optional[float] = None
    day_cell_min_height: Optional[float] = None
    two_line_segments: List[SegmentKeyPayload] = Field(default_factory=list)
    cell_width: Optional[float] = Field(
        default=None, gt=0, description="Estimate two-line titles for cells of this width"
    )
    row_width: Optional[float] = Field(
        default=None, gt=0, description="Return bar rectangles for rows of this width"
    )

    @model_validator(mode="after")
    def _check_unique_events(self) -> "MonthLayoutRequest":
        seen: set[str] = set()
        for event in self.events:
            if event.event_id in seen:
                raise ValueError(f"Duplicate event id '{event.event_id}'")
            seen.add(event.event_id)
        return self

    @model_validator(mode="after")
    def _check_consistent_timezones(self) -> "MonthLayoutRequest":
        stamps = [stamp for event in self.events for stamp in (event.start, event.end)]
        aware = {stamp.tzinfo is not None for stamp in stamps}
        if len(aware) > 1:
            raise ValueError("Event times must be all timezone-aware or all naive")
        return self

    def build_settings(self, defaults: LayoutSettings) -> LayoutSettings:
        return defaults.with_overrides(
            max_lanes=self.max_lanes,
            week_starts_on=self.week_starts_on,
            clamp_to_month=self.clamp_to_month,
            lane_height=self.lane_height,
            lane_spacing=self.lane_spacing,
            day_cell_min_height=self.day_cell_min_height,
        )


class SettingsResponse(BaseModel):
    max_lanes: int
    week_starts_on: int
    day_cell_min_height: float
    lane_height: float
    lane_spacing: float
    day_header_height: float
    clamp_to_month: bool


class GridResponse(BaseModel):
    visible_start: date
    visible_end: date
    weeks: List[List[date]]


class BarResponse(BaseModel):
    left: float
    top: float
    width: float
    height: float
    max_lines: int


class PositionedSegmentResponse(BaseModel):
    event_id: str
    title: str
    color: Optional[str]
    week_index: int
    start_col: int
    end_col: int
    continues_left: bool
    continues_right: bool
    lane: int
    lane_span: int
    hidden: bool
    bar: Optional[BarResponse] = None


class WeekRowResponse(BaseModel):
    positioned: List[PositionedSegmentResponse]
    hidden_count_per_col: List[int]
    total_height: float


class MonthLayoutResponse(BaseModel):
    settings: SettingsResponse
    grid: GridResponse
    rows: List[WeekRowResponse]


def _serialize_settings(settings: LayoutSettings) -> SettingsResponse:
    return SettingsResponse(
        max_lanes=settings.max_lanes,
        week_starts_on=int(settings.week_starts_on),
        day_cell_min_height=settings.day_cell_min_height,
        lane_height=settings.lane_height,
        lane_spacing=settings.lane_spacing,
        day_header_height=settings.day_header_height,
        clamp_to_month=settings.clamp_to_month,
    )


def _serialize_positioned(
    positioned: PositionedSegment,
    layout: MonthLayout,
    row_width: Optional[float],
) -> PositionedSegmentResponse:
    segment = positioned.segment
    hidden = positioned.is_hidden(layout.settings.max_lanes)
    bar: Optional[BarResponse] = None
    if row_width is not None and not hidden:
        rect = bar_geometry(
            positioned, row_width, layout.settings.row_metrics(), layout.settings.max_lanes
        )
        bar = BarResponse(
            left=rect.left,
            top=rect.top,
            width=rect.width,
            height=rect.height,
            max_lines=rect.max_lines,
        )
    return PositionedSegmentResponse(
        event_id=segment.event.event_id,
        title=segment.event.title,
        color=segment.event.color,
        week_index=segment.week_index,
        start_col=segment.start_col,
        end_col=segment.end_col,
        continues_left=segment.continues_left,
        continues_right=segment.continues_right,
        lane=positioned.lane,
        lane_span=positioned.lane_span,
        hidden=hidden,
        bar=bar,
    )


def _serialize_layout(layout: MonthLayout, row_width: Optional[float]) -> MonthLayoutResponse:
    grid = GridResponse(
        visible_start=layout.grid.visible_start,
        visible_end=layout.grid.visible_end,
        weeks=[list(week) for week in layout.grid.weeks],
    )
    rows = [
        WeekRowResponse(
            positioned=[_serialize_positioned(ps, layout, row_width) for ps in row.positioned],
            hidden_count_per_col=row.hidden_count_per_col,
            total_height=row.total_height,
        )
        for row in layout.rows
    ]
    return MonthLayoutResponse(settings=_serialize_settings(layout.settings), grid=grid, rows=rows)


def _estimate_keys(cell_width: Optional[float]) -> Optional[KeyMeasure]:
    if cell_width is None:
        return None

    def measure(segments: Sequence[WeekSegment]) -> set[SegmentKey]:
        return collect_two_line_keys(segments, cell_width, approximate_text_width)

    return measure


def create_app(settings: LayoutSettings | None = None) -> FastAPI:
    defaults = settings or LayoutSettings()

    app = FastAPI(title="Month Layout API")

    @app.get("/api/settings", response_model=SettingsResponse)
    def get_settings() -> SettingsResponse:
        return _serialize_settings(defaults)

    @app.post("/api/month-layout", response_model=MonthLayoutResponse)
    def month_layout(payload: MonthLayoutRequest) -> MonthLayoutResponse:
        try:
            layout_settings = payload.build_settings(defaults)
        except LayoutConfigError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

        events = [event.build_event() for event in payload.events]
        layout = build_month_layout(
            payload.month,
            events,
            settings=layout_settings,
            two_line_keys={item.build_key() for item in payload.two_line_segments},
            measure_keys=_estimate_keys(payload.cell_width),
        )
        logger.info(
            "Computed layout for %04d-%02d: %s events, %s weeks",
            payload.month.year,
            payload.month.month,
            len(events),
            layout.grid.week_count,
        )
        return _serialize_layout(layout, payload.row_width)

    return app


app = create_app()
