"""
Camera -> bus lane segment index.

Cameras only carry a street name and a point, while a street usually has
one segment per direction. Each camera is assigned to the segment(s) it
watches:

1. Candidate segments share the camera's street (normalized, via alias or
   reverse alias) and lie within CAMERA_SNAP_RADIUS.
2. One candidate, or all in one direction: the nearest one.
3. Several directions and a house number: the nearest, unless the two
   nearest opposing segments are within CAMERA_AMBIGUITY_THRESHOLD of each
   other, in which case house number parity picks the side (even numbers
   sit on the side of the N/NE/E bound lane).
4. Several directions and no house number: both opposing segments when
   they are within CAMERA_BIDIRECTIONAL_THRESHOLD, marked bidirectional;
   otherwise the nearest.
Cameras with no street match or nothing in range are left out.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from config import (
    CAMERA_AMBIGUITY_THRESHOLD,
    CAMERA_BIDIRECTIONAL_THRESHOLD,
    CAMERA_SNAP_RADIUS,
)
from geometry import point_to_polyline_m
from matching.street_names import STREET_ALIASES, normalize_street, resolve_alias
from transformers.feature_transformer import CameraPoint, FeatureId, RoadSegment

logger = logging.getLogger(__name__)

ASCENDING_DIRECTIONS = ("N", "NE", "E")
NO_DIRECTION = "none"


@dataclass(frozen=True)
class CameraAssignment:
    camera_id: FeatureId
    segments: Tuple[RoadSegment, ...]
    bidirectional: bool = False

    @property
    def segment_ids(self) -> List[FeatureId]:
        return [s.segment_id for s in self.segments]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cameraId": self.camera_id,
            "segmentIds": self.segment_ids,
            "bidirectional": self.bidirectional,
        }


def _direction_key(segment: RoadSegment) -> str:
    return segment.direction or NO_DIRECTION


def _group_by_street(segments: Iterable[RoadSegment]) -> Dict[str, List[RoadSegment]]:
    by_street: Dict[str, List[RoadSegment]] = {}
    for segment in segments:
        norm = normalize_street(segment.street_name)
        if not norm:
            continue
        by_street.setdefault(norm, []).append(segment)
        aliased = resolve_alias(norm)
        if aliased != norm:
            by_street.setdefault(aliased, []).append(segment)
    return by_street


def _street_candidates(
    camera_street: str, by_street: Dict[str, List[RoadSegment]]
) -> List[RoadSegment]:
    aliased = resolve_alias(camera_street)
    candidates = by_street.get(camera_street) or by_street.get(aliased) or []
    if candidates:
        return candidates

    for gis_name, schedule_name in STREET_ALIASES.items():
        if schedule_name in (camera_street, aliased):
            candidates = by_street.get(gis_name) or []
            if candidates:
                return candidates
    return []


def _pick_segments(
    camera: CameraPoint, nearby: Sequence[Tuple[RoadSegment, float]]
) -> Tuple[List[RoadSegment], bool]:
    """Apply the direction / house number rules to distance-sorted candidates"""
    distinct = {_direction_key(s) for s, _ in nearby} - {NO_DIRECTION}
    nearest, nearest_dist = nearby[0]

    if len(nearby) == 1 or len(distinct) <= 1:
        return [nearest], False

    opposing = next(
        ((s, d) for s, d in nearby if _direction_key(s) != _direction_key(nearest)),
        None,
    )
    if opposing is None:
        return [nearest], False
    other, other_dist = opposing
    gap = abs(nearest_dist - other_dist)

    house_number = camera.house_number_value
    if house_number is not None:
        if gap >= CAMERA_AMBIGUITY_THRESHOLD:
            return [nearest], False
        is_even = house_number % 2 == 0
        nearest_ascending = nearest.direction in ASCENDING_DIRECTIONS
        return ([nearest] if is_even == nearest_ascending else [other]), False

    if gap < CAMERA_BIDIRECTIONAL_THRESHOLD:
        return [nearest, other], True
    return [nearest], False


def build_camera_segment_index(
    segments: Sequence[RoadSegment], cameras: Sequence[CameraPoint]
) -> Dict[FeatureId, CameraAssignment]:
    """Deterministic camera id -> assignment map for one segment/camera snapshot"""
    index: Dict[FeatureId, CameraAssignment] = {}
    if not segments or not cameras:
        return index

    by_street = _group_by_street(segments)

    for camera in cameras:
        camera_street = normalize_street(camera.street_name)
        if not camera_street:
            continue

        candidates = _street_candidates(camera_street, by_street)
        if not candidates:
            continue

        nearby = []
        for segment in candidates:
            dist = point_to_polyline_m(camera.lat, camera.lng, segment.paths)
            if dist < CAMERA_SNAP_RADIUS:
                nearby.append((segment, dist))
        if not nearby:
            continue
        nearby.sort(key=lambda item: item[1])

        assigned, bidirectional = _pick_segments(camera, nearby)
        index[camera.camera_id] = CameraAssignment(
            camera_id=camera.camera_id,
            segments=tuple(assigned),
            bidirectional=bidirectional,
        )

    bidirectional_count = sum(1 for a in index.values() if a.bidirectional)
    logger.info(
        f"Camera-segment index: {len(index)} mapped ({bidirectional_count} bidirectional), "
        f"{len(cameras) - len(index)} unmapped"
    )
    return index


def cameras_on_segments(
    index: Dict[FeatureId, CameraAssignment],
    cameras: Iterable[CameraPoint],
    segment_ids: Iterable[Optional[FeatureId]],
) -> List[CameraPoint]:
    """Cameras whose assignment includes any of the given segments"""
    wanted = {sid for sid in segment_ids if sid is not None}
    if not wanted:
        return []
    result = []
    for camera in cameras:
        assignment = index.get(camera.camera_id)
        if assignment and any(sid in wanted for sid in assignment.segment_ids):
            result.append(camera)
    return result
