"""
Which bus lane segment the driver is on, which one comes next, and which
way the car is heading.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from shapely import STRtree
from shapely.geometry import box

from config import (
    GPS_MIN_SPEED_FOR_HEADING,
    HEADING_SNAP_RADIUS,
    SEGMENT_MATCH_RADIUS,
    STREET_DETECT_RADIUS,
)
from geometry import angle_diff, path_bearing, point_to_polyline_m
from matching.street_names import normalize_street, resolve_alias
from transformers.feature_transformer import RoadSegment
from .gps_filter import FilteredPosition

logger = logging.getLogger(__name__)

METERS_PER_DEGREE = 111320.0


@dataclass(frozen=True)
class CurrentSegment:
    segment: RoadSegment
    distance: float
    travel_direction: Optional[float]  # degrees; None when unknown


class SegmentTracker:
    """
    Nearest-segment queries over one segment snapshot. An STRtree on the
    segment geometries narrows each query to segments whose bounding box is
    near the point; distances are then measured exactly.
    """

    def __init__(self, segments: Sequence[RoadSegment]):
        self.segments: List[RoadSegment] = list(segments)
        self._tree = STRtree([s.geometry for s in self.segments]) if self.segments else None

    def _nearby(self, lat: float, lng: float, radius: float) -> List[RoadSegment]:
        """Segments whose bounds come within `radius` metres, in snapshot order"""
        if self._tree is None:
            return []
        # A little slack so the box never cuts off a segment inside the radius
        dlat = radius * 1.1 / METERS_PER_DEGREE
        dlng = radius * 1.1 / (METERS_PER_DEGREE * max(math.cos(math.radians(lat)), 1e-6))
        hits = self._tree.query(box(lng - dlng, lat - dlat, lng + dlng, lat + dlat))
        return [self.segments[i] for i in sorted(int(i) for i in hits)]

    def _nearest(
        self, lat: float, lng: float, radius: float, candidates: Iterable[RoadSegment] = None
    ) -> Tuple[Optional[RoadSegment], float]:
        if candidates is None:
            candidates = self._nearby(lat, lng, radius)
        best = None
        best_dist = math.inf
        for segment in candidates:
            dist = point_to_polyline_m(lat, lng, segment.paths)
            if dist < best_dist and dist < radius:
                best = segment
                best_dist = dist
        return best, best_dist

    def find_current_segment(
        self, lat: float, lng: float, bearing: Optional[float] = None
    ) -> Optional[CurrentSegment]:
        segment, dist = self._nearest(lat, lng, SEGMENT_MATCH_RADIUS)
        if segment is None:
            return None

        travel_direction = segment.direction_bearing
        if travel_direction is None:
            travel_direction = bearing
        return CurrentSegment(segment, dist, travel_direction)

    def find_next_segment(self, current: Optional[CurrentSegment]) -> Optional[RoadSegment]:
        """
        Segment of the same street that continues from the junction the
        driver is heading toward. Geometry runs from_street -> to_street.
        """
        if current is None:
            return None
        segment = current.segment
        street = normalize_street(segment.street_name)
        if not street:
            return None

        along = path_bearing(segment.paths)
        forward = True
        if current.travel_direction is not None and along is not None:
            forward = angle_diff(current.travel_direction, along) < 90

        target = normalize_street(segment.to_street if forward else segment.from_street)
        if not target:
            return None

        best = None
        best_diff = math.inf
        for candidate in self.segments:
            if candidate is segment or normalize_street(candidate.street_name) != street:
                continue
            if target not in (normalize_street(candidate.from_street),
                              normalize_street(candidate.to_street)):
                continue

            candidate_bearing = path_bearing(candidate.paths)
            if current.travel_direction is None or candidate_bearing is None:
                diff = 0.0
            else:
                diff = angle_diff(current.travel_direction, candidate_bearing)
            if diff < best_diff:
                best_diff = diff
                best = candidate

        return best

    def nearest_lane_direction(self, lat: float, lng: float) -> Optional[float]:
        """Signed direction of the nearest one-way lane within the heading snap radius"""
        one_way = (s for s in self._nearby(lat, lng, HEADING_SNAP_RADIUS) if s.direction)
        segment, _ = self._nearest(lat, lng, HEADING_SNAP_RADIUS, one_way)
        return segment.direction_bearing if segment is not None else None

    def resolve_heading(
        self,
        lat: float,
        lng: float,
        filtered: Optional[FilteredPosition],
        previous: Optional[float],
        min_speed: float = GPS_MIN_SPEED_FOR_HEADING,
    ) -> Optional[float]:
        """One-way lane direction, else the GPS bearing when moving, else the last heading"""
        lane_direction = self.nearest_lane_direction(lat, lng)
        if lane_direction is not None:
            return lane_direction

        if filtered is not None and filtered.bearing is not None and filtered.speed >= min_speed:
            return filtered.bearing

        return previous

    def nearest_street(self, lat: float, lng: float) -> Optional[Dict]:
        """Street and segment nearest to a report location, for prefilling the form"""
        segment, dist = self._nearest(lat, lng, STREET_DETECT_RADIUS)
        if segment is None or not segment.street_name:
            return None
        return {
            "street": segment.street_name,
            "segment_id": segment.segment_id,
            "distance": dist,
        }

    def segments_for_street(self, name: Optional[str]) -> List[RoadSegment]:
        """All segments of a street, matched by normalized name or its alias"""
        norm = normalize_street(name)
        if not norm:
            return []
        aliased = resolve_alias(norm)
        return [
            s for s in self.segments
            if normalize_street(s.street_name) in (norm, aliased)
        ]
