"""Sanity checks on the schedule table and on each fetched snapshot"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Set

from schedules.models import DAY_FIELDS, ScheduleEntry
from transformers.feature_transformer import CameraPoint, RoadSegment

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of data validation"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)

    def add_error(self, message: str):
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str):
        self.warnings.append(message)


class DataValidator:
    """
    Validates bus lane data for completeness and plausibility. A snapshot
    that fails validation is not swapped in.
    """

    # Tel Aviv-Yafo bounding box
    TLV_BOUNDS = {
        "min_lat": 31.95,
        "max_lat": 32.20,
        "min_lng": 34.70,
        "max_lng": 34.90,
    }

    # Minimum expected counts
    MIN_SEGMENTS = 50
    MIN_CAMERAS = 10

    MAX_COUNT_CHANGE = 0.2

    def validate_schedule_table(self, entries: Sequence[ScheduleEntry]) -> ValidationResult:
        result = ValidationResult(is_valid=True)

        if not entries:
            result.add_error("Schedule table is empty")
            return result

        for i, entry in enumerate(entries):
            label = f"Schedule row {i} ({entry.street or '?'})"
            if not entry.street or not entry.street.strip():
                result.add_error(f"Schedule row {i}: missing street")
            if entry.all_week:
                continue

            for day in DAY_FIELDS:
                for start, end in entry.ranges_for(day) or ():
                    if not (0 <= start <= 24 and 0 <= end <= 24):
                        result.add_error(f"{label}: {day} range {start}-{end} outside 0-24")
                    elif start == end:
                        result.add_error(f"{label}: {day} range {start}-{end} has zero length")

        result.stats = {"entries": len(entries)}
        logger.info(
            f"Schedule table validation: valid={result.is_valid}, "
            f"errors={len(result.errors)}, warnings={len(result.warnings)}"
        )
        return result

    def validate_snapshot(
        self, segments: Sequence[RoadSegment], cameras: Sequence[CameraPoint]
    ) -> ValidationResult:
        result = ValidationResult(is_valid=True)

        if not segments:
            result.add_error("No bus lane segments in snapshot")
        elif len(segments) < self.MIN_SEGMENTS:
            result.add_warning(
                f"Low segment count: {len(segments)} (expected >= {self.MIN_SEGMENTS})"
            )

        if len(cameras) < self.MIN_CAMERAS:
            result.add_warning(
                f"Low camera count: {len(cameras)} (expected >= {self.MIN_CAMERAS})"
            )

        seen_ids: Set[Any] = set()
        outside_bounds = 0
        for segment in segments:
            if segment.segment_id in seen_ids:
                result.add_warning(f"Duplicate segment id: {segment.segment_id}")
            seen_ids.add(segment.segment_id)

            min_lng, min_lat, max_lng, max_lat = segment.bounds
            if not (self._is_in_bounds(min_lat, min_lng) and self._is_in_bounds(max_lat, max_lng)):
                outside_bounds += 1

        seen_cameras: Set[Any] = set()
        cameras_outside = 0
        for camera in cameras:
            if camera.camera_id in seen_cameras:
                result.add_warning(f"Duplicate camera id: {camera.camera_id}")
            seen_cameras.add(camera.camera_id)
            if not self._is_in_bounds(camera.lat, camera.lng):
                cameras_outside += 1

        if outside_bounds:
            result.add_warning(f"{outside_bounds} segments outside Tel Aviv bounds")
        if cameras_outside:
            result.add_warning(f"{cameras_outside} cameras outside Tel Aviv bounds")

        result.stats = {
            "segments_count": len(segments),
            "cameras_count": len(cameras),
            "validation_time": datetime.now(timezone.utc).isoformat(),
        }

        logger.info(
            f"Validation complete: valid={result.is_valid}, "
            f"errors={len(result.errors)}, warnings={len(result.warnings)}"
        )
        return result

    def _is_in_bounds(self, lat: float, lng: float) -> bool:
        return (
            self.TLV_BOUNDS["min_lat"] <= lat <= self.TLV_BOUNDS["max_lat"] and
            self.TLV_BOUNDS["min_lng"] <= lng <= self.TLV_BOUNDS["max_lng"]
        )

    def validate_incremental(
        self,
        new_segments: Sequence[RoadSegment],
        existing_segments: Sequence[RoadSegment],
        new_cameras: Sequence[CameraPoint] = (),
        existing_cameras: Sequence[CameraPoint] = (),
    ) -> ValidationResult:
        """Warn about large swings between consecutive snapshots"""
        result = ValidationResult(is_valid=True)

        for label, new, existing in (
            ("segment", len(new_segments), len(existing_segments)),
            ("camera", len(new_cameras), len(existing_cameras)),
        ):
            if existing > 0 and abs(new - existing) / existing > self.MAX_COUNT_CHANGE:
                result.add_warning(f"Significant {label} count change: {existing} -> {new}")

        return result
