"""Live driving support: GPS filtering, segment tracking and alerts"""
from .alerts import Alert, AlertEngine
from .gps_filter import FilteredPosition, GpsFilter, GpsSample
from .segment_tracker import CurrentSegment, SegmentTracker
from .session import DrivingSession, TrackingUpdate

__all__ = [
    "Alert",
    "AlertEngine",
    "CurrentSegment",
    "DrivingSession",
    "FilteredPosition",
    "GpsFilter",
    "GpsSample",
    "SegmentTracker",
    "TrackingUpdate",
]
