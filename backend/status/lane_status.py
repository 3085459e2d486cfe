"""
Blocked/open status of a bus lane segment at a point in time.

Precedence: inactive lane -> community sign override -> static schedule.
A segment with no schedule match is reported as "unknown" and treated as
blocked, while a missing override simply falls through to the table.
"""
import logging
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple
from zoneinfo import ZoneInfo

from config import LOCAL_TIMEZONE
from matching.schedule_matcher import ScheduleMatcher
from transformers.feature_transformer import FeatureId, RoadSegment
from .time_windows import (
    day_type,
    decimal_hour,
    format_hour,
    format_ranges,
    hebrew_day_name,
    is_in_time_range,
    to_local,
)

logger = logging.getLogger(__name__)

SIGN_MARKER = "🪧"

CATEGORY_COLORS = {
    "unknown": "#95a5a6",
    "blocked": "#e74c3c",
    "open": "#2ecc71",
}

REASON_INACTIVE = "נתצ לא פעיל"
REASON_PERMANENT = "נתצ קבוע – חסום תמיד (24/7)"
REASON_UNKNOWN = "לא נמצא מידע על שעות – ייתכן שחסום"


@dataclass
class LaneStatus:
    blocked: bool
    category: str  # blocked | open | unknown
    reason: str
    schedule: Any = None   # ScheduleEntry or DecodedHours that decided the status
    override: Any = None   # Override applied, if any

    @property
    def color(self) -> str:
        return CATEGORY_COLORS[self.category]

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "blocked": self.blocked,
            "category": self.category,
            "reason": self.reason,
            "color": self.color,
            "schedule": self.schedule.to_dict() if self.schedule is not None else None,
            "signOverride": None,
        }
        if self.override is not None:
            result["signOverride"] = {
                "reportId": self.override.report_id,
                "street": self.override.street,
                "timestamp": self.override.timestamp,
            }
        return result


class OverrideProvider(ABC):
    """Source of community overrides consulted before the static table"""

    @abstractmethod
    def find_override(self, segment: RoadSegment):
        """Return an override with a `hours` attribute, or None"""


class NullOverrideProvider(OverrideProvider):
    def find_override(self, segment: RoadSegment):
        return None


class LaneStatusEvaluator:
    """Evaluates segments against overrides and the static schedule table"""

    def __init__(
        self,
        matcher: ScheduleMatcher,
        override_provider: Optional[OverrideProvider] = None,
        tz: Optional[ZoneInfo] = None,
    ):
        self.matcher = matcher
        self.override_provider = (
            override_provider if override_provider is not None else NullOverrideProvider()
        )
        self.tz = tz or ZoneInfo(LOCAL_TIMEZONE)

    def evaluate(self, segment: RoadSegment, now: datetime) -> LaneStatus:
        local = to_local(now, self.tz)

        if not segment.is_active:
            return LaneStatus(False, "open", REASON_INACTIVE)

        override = self.override_provider.find_override(segment)
        if override is not None and override.hours is not None:
            return self._evaluate_hours(override.hours, local, override=override)

        schedule = self.matcher.find_schedule(segment)
        if schedule is None:
            return LaneStatus(True, "unknown", REASON_UNKNOWN)

        return self._evaluate_hours(schedule, local)

    def evaluate_all(
        self, segments: Iterable[RoadSegment], now: datetime
    ) -> Tuple[Dict[FeatureId, LaneStatus], Dict[str, int]]:
        """One render pass: status per segment id and counts per category"""
        statuses = {}
        for segment in segments:
            statuses[segment.segment_id] = self.evaluate(segment, now)

        counts = Counter(status.category for status in statuses.values())
        summary = {category: counts.get(category, 0) for category in CATEGORY_COLORS}
        logger.debug(f"Evaluated {len(statuses)} segments: {summary}")
        return statuses, summary

    def _evaluate_hours(self, hours, local: datetime, override=None) -> LaneStatus:
        suffix = f" {SIGN_MARKER}" if override is not None else ""

        if hours.all_week:
            return LaneStatus(True, "blocked", REASON_PERMANENT + suffix, hours, override)

        ranges = hours.ranges_for(day_type(local))
        if not ranges:
            reason = f"אין הגבלה ביום {hebrew_day_name(local)}{suffix}"
            return LaneStatus(False, "open", reason, hours, override)

        current = decimal_hour(local)
        for start, end in ranges:
            if is_in_time_range(current, start, end):
                reason = f"חסום כעת: {format_hour(start)} - {format_hour(end)}{suffix}"
                return LaneStatus(True, "blocked", reason, hours, override)

        reason = f"פתוח כעת (הגבלה: {format_ranges(ranges)}){suffix}"
        return LaneStatus(False, "open", reason, hours, override)
