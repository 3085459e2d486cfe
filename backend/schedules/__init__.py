"""Static bus lane schedule table"""
from .bus_lane_hours import BUS_LANE_SCHEDULE, SCHEDULE_VERSION, load_schedule_table
from .models import DAY_FIELDS, ScheduleEntry, WeeklyHoursMixin, to_ranges

__all__ = [
    "BUS_LANE_SCHEDULE",
    "DAY_FIELDS",
    "SCHEDULE_VERSION",
    "ScheduleEntry",
    "WeeklyHoursMixin",
    "load_schedule_table",
    "to_ranges",
]
