"""Month-view calendar layout engine."""

from .config import LayoutSettings
from .layout.month import BarRect, MonthLayout, bar_geometry, build_month_layout, visible_bars

__all__ = [
    "BarRect",
    "LayoutSettings",
    "MonthLayout",
    "bar_geometry",
    "build_month_layout",
    "visible_bars",
]
