"""Day classes, decimal hours and [start, end) interval helpers"""
import re
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from config import LOCAL_TIMEZONE


class DayType:
    SUN_THU = "sun_thu"
    FRI = "fri"
    SAT = "sat"


HEBREW_DAYS = ["ראשון", "שני", "שלישי", "רביעי", "חמישי", "שישי", "שבת"]

_RANGE_RE = re.compile(r"(\d{1,2}):(\d{2})\s*-\s*(\d{1,2}):(\d{2})")


def to_local(dt: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    """Aware datetimes are converted to the service time zone; naive ones are already local"""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(tz or ZoneInfo(LOCAL_TIMEZONE))


def sunday_index(dt: datetime) -> int:
    """Day of week with Sunday = 0 ... Saturday = 6"""
    return (dt.weekday() + 1) % 7


def day_type(dt: datetime) -> str:
    """
    Israeli week: Sunday-Thursday, Friday, Saturday.
    Holiday eves and holidays are not detected; only the calendar weekday counts.
    """
    day = sunday_index(dt)
    if day == 5:
        return DayType.FRI
    if day == 6:
        return DayType.SAT
    return DayType.SUN_THU


def hebrew_day_name(dt: datetime) -> str:
    return HEBREW_DAYS[sunday_index(dt)]


def decimal_hour(dt: datetime) -> float:
    """14:30 -> 14.5"""
    return dt.hour + dt.minute / 60


def is_in_time_range(current: float, start: float, end: float) -> bool:
    """Half-open [start, end); start > end wraps past midnight (22 -> 6)"""
    if start <= end:
        return start <= current < end
    return current >= start or current < end


def format_hour(decimal: Optional[float]) -> str:
    if decimal is None:
        return "--:--"
    hours = int(decimal)
    minutes = int(round((decimal - hours) * 60))
    if minutes == 60:
        hours += 1
        minutes = 0
    return f"{hours:02d}:{minutes:02d}"


def format_ranges(ranges: Iterable[Sequence[float]], sep: str = "-") -> str:
    """((7, 10), (16, 19)) -> "07:00-10:00, 16:00-19:00" """
    return ", ".join(f"{format_hour(start)}{sep}{format_hour(end)}" for start, end in ranges)


def parse_time_ranges(text: Optional[str]) -> Optional[List[Tuple[float, float]]]:
    """
    Parse hours typed off a sign photo, e.g. "07:00-10:00, 16:00-19:00".
    Parts that don't look like HH:MM-HH:MM are ignored; None when nothing parses.
    """
    if not text or not text.strip():
        return None

    ranges = []
    for part in text.split(","):
        match = _RANGE_RE.search(part.strip())
        if match:
            start = int(match.group(1)) + int(match.group(2)) / 60
            end = int(match.group(3)) + int(match.group(4)) / 60
            ranges.append((start, end))
    return ranges or None
