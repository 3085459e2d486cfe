from .lane_status import (
    CATEGORY_COLORS,
    SIGN_MARKER,
    LaneStatus,
    LaneStatusEvaluator,
    NullOverrideProvider,
    OverrideProvider,
)
from .time_windows import (
    DayType,
    day_type,
    decimal_hour,
    format_hour,
    format_ranges,
    is_in_time_range,
    parse_time_ranges,
)

__all__ = [
    "CATEGORY_COLORS",
    "SIGN_MARKER",
    "DayType",
    "LaneStatus",
    "LaneStatusEvaluator",
    "NullOverrideProvider",
    "OverrideProvider",
    "day_type",
    "decimal_hour",
    "format_hour",
    "format_ranges",
    "is_in_time_range",
    "parse_time_ranges",
]
