"""Driving session: GPS fixes in, heading / current segment / alerts out"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from .alerts import Alert, AlertEngine
from .gps_filter import FilteredPosition, GpsFilter, GpsSample
from .segment_tracker import CurrentSegment, SegmentTracker

logger = logging.getLogger(__name__)

# Geolocation error codes
PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3


@dataclass
class TrackingUpdate:
    position: FilteredPosition
    heading: Optional[float]
    current: Optional[CurrentSegment]
    next_segment: Optional[object] = None
    alerts: List[Alert] = field(default_factory=list)


class DrivingSession:
    """
    Owns the per-drive state (filter, heading, current segment). Nothing
    happens until start(); if location is unavailable the session simply
    stays inactive.
    """

    def __init__(
        self,
        tracker: SegmentTracker,
        alert_engine: Optional[AlertEngine] = None,
        gps_filter: Optional[GpsFilter] = None,
    ):
        self.tracker = tracker
        self.alert_engine = alert_engine
        self.gps_filter = gps_filter or GpsFilter()
        self.active = False
        self.heading: Optional[float] = None
        self.current: Optional[CurrentSegment] = None

    def start(self, available: bool = True) -> bool:
        if not available:
            logger.warning("Location is not available; tracking not started")
            return False
        self.active = True
        logger.info("Tracking started")
        return True

    def stop(self):
        self.active = False
        self.gps_filter.reset()
        self.heading = None
        self.current = None
        if self.alert_engine is not None:
            self.alert_engine.reset()
        logger.info("Tracking stopped")

    def on_error(self, code: int, message: str = ""):
        logger.warning(f"GPS error {code}: {message}")
        if code == PERMISSION_DENIED:
            self.stop()

    def update_tracker(self, tracker: SegmentTracker):
        """Swap in a tracker built from a refreshed segment snapshot"""
        self.tracker = tracker
        self.current = None

    def on_position(self, sample: GpsSample, now: Optional[datetime] = None) -> Optional[TrackingUpdate]:
        if not self.active:
            return None

        position = self.gps_filter.update(sample)
        self.heading = self.tracker.resolve_heading(
            position.lat, position.lng, position, self.heading,
            min_speed=self.gps_filter.min_heading_speed,
        )

        self.current = self.tracker.find_current_segment(position.lat, position.lng, position.bearing)
        next_segment = self.tracker.find_next_segment(self.current)

        alerts = []
        if self.alert_engine is not None and self.alert_engine.enabled:
            if now is None:
                now = datetime.fromtimestamp(sample.timestamp, tz=timezone.utc)
            alerts = self.alert_engine.process(
                position.lat, position.lng, self.current, next_segment, now, sample.timestamp
            )

        return TrackingUpdate(position, self.heading, self.current, next_segment, alerts)
