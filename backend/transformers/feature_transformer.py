"""Transform raw ArcGIS features into bus lane segments and cameras"""
import logging
import math
import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, List, Optional, Tuple, Union

from shapely.geometry import MultiLineString

from config import ACTIVE_STATUS
from geometry import DIRECTION_BEARINGS

logger = logging.getLogger(__name__)

FeatureId = Union[int, str]
Paths = Tuple[Tuple[Tuple[float, float], ...], ...]


@dataclass(frozen=True)
class RoadSegment:
    """One directional stretch of bus lane as published by layer 611"""
    segment_id: FeatureId
    street_name: str
    from_street: str
    to_street: str
    direction: Optional[str]  # N, NE, ... NW; None for two-way/unknown
    status: Optional[str]
    paths: Paths  # parts of (lng, lat) vertices
    lane_type: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return not self.status or self.status == ACTIVE_STATUS

    @property
    def direction_bearing(self) -> Optional[float]:
        if self.direction is None:
            return None
        return DIRECTION_BEARINGS[self.direction]

    @cached_property
    def geometry(self) -> MultiLineString:
        return MultiLineString([list(path) for path in self.paths])

    @cached_property
    def bounds(self) -> Tuple[float, float, float, float]:
        xs = [v[0] for path in self.paths for v in path]
        ys = [v[1] for path in self.paths for v in path]
        return min(xs), min(ys), max(xs), max(ys)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.segment_id,
            "street": self.street_name,
            "from": self.from_street,
            "to": self.to_street,
            "direction": self.direction,
            "active": self.is_active,
            "type": self.lane_type,
            "paths": [[[lat, lng] for lng, lat in path] for path in self.paths],
        }


@dataclass(frozen=True)
class CameraPoint:
    """A bus lane enforcement camera from layer 949"""
    camera_id: FeatureId
    lat: float
    lng: float
    street_name: str
    house_number: Optional[str] = None
    status: Optional[str] = None
    name: str = ""
    site_number: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return not self.status or self.status == ACTIVE_STATUS

    @property
    def house_number_value(self) -> Optional[int]:
        """Leading digits of the house number ("12א" -> 12); None when absent"""
        if self.house_number is None:
            return None
        match = re.match(r"\s*(\d+)", str(self.house_number))
        if not match:
            return None
        value = int(match.group(1))
        return value if value > 0 else None

    @property
    def alert_key(self) -> str:
        return str(self.site_number or self.camera_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.camera_id,
            "lat": self.lat,
            "lng": self.lng,
            "street": self.street_name,
            "houseNumber": self.house_number,
            "name": self.name,
            "active": self.is_active,
        }


@dataclass
class TransformStats:
    segments: int = 0
    cameras: int = 0
    skipped_no_id: int = 0
    skipped_no_geometry: int = 0
    errors: int = 0
    skipped_ids: List[FeatureId] = field(default_factory=list)


class FeatureTransformer:
    """
    Turns ArcGIS query results ({"attributes": ..., "geometry": ...}) into
    RoadSegment and CameraPoint records. Records with missing identifiers or
    unusable geometry are skipped and counted, never fatal.
    """

    def __init__(self):
        self.stats = TransformStats()

    def transform_segments(self, raw_features: List[Dict[str, Any]]) -> List[RoadSegment]:
        logger.info(f"Transforming {len(raw_features)} bus lane features")
        segments = []

        for feature in raw_features:
            try:
                attrs = feature.get("attributes") or {}
                segment_id = self._feature_id(attrs)
                if segment_id is None:
                    self.stats.skipped_no_id += 1
                    continue

                paths = self._parse_paths((feature.get("geometry") or {}).get("paths"))
                if not paths:
                    logger.warning(f"Skipping bus lane {segment_id} without usable geometry")
                    self.stats.skipped_no_geometry += 1
                    self.stats.skipped_ids.append(segment_id)
                    continue

                segments.append(RoadSegment(
                    segment_id=segment_id,
                    street_name=self._text(attrs.get("street_name")),
                    from_street=self._text(attrs.get("from_street")),
                    to_street=self._text(attrs.get("to_street")),
                    direction=self._direction(attrs.get("direction_name")),
                    status=attrs.get("status"),
                    paths=paths,
                    lane_type=attrs.get("type_of_nataz"),
                ))

            except Exception as e:
                logger.error(f"Error transforming bus lane feature: {e}")
                self.stats.errors += 1

        self.stats.segments = len(segments)
        logger.info(f"Transformed {len(segments)} bus lane segments")
        return segments

    def transform_cameras(self, raw_features: List[Dict[str, Any]]) -> List[CameraPoint]:
        logger.info(f"Transforming {len(raw_features)} camera features")
        cameras = []

        for feature in raw_features:
            try:
                attrs = feature.get("attributes") or {}
                camera_id = self._feature_id(attrs)
                if camera_id is None:
                    self.stats.skipped_no_id += 1
                    continue

                geometry = feature.get("geometry") or {}
                lng = self._safe_float(geometry.get("x"))
                lat = self._safe_float(geometry.get("y"))
                if lat is None or lng is None:
                    logger.warning(f"Skipping camera {camera_id} without location")
                    self.stats.skipped_no_geometry += 1
                    self.stats.skipped_ids.append(camera_id)
                    continue

                house_number = attrs.get("ms_bayit1")
                cameras.append(CameraPoint(
                    camera_id=camera_id,
                    lat=lat,
                    lng=lng,
                    street_name=self._text(attrs.get("t_rechov1")),
                    house_number=str(house_number) if house_number not in (None, "") else None,
                    status=attrs.get("status"),
                    name=self._text(attrs.get("name")),
                    site_number=attrs.get("ms_atar"),
                ))

            except Exception as e:
                logger.error(f"Error transforming camera feature: {e}")
                self.stats.errors += 1

        self.stats.cameras = len(cameras)
        logger.info(f"Transformed {len(cameras)} cameras")
        return cameras

    def _feature_id(self, attrs: Dict[str, Any]) -> Optional[FeatureId]:
        for key in ("oid", "OBJECTID", "objectid"):
            value = attrs.get(key)
            if value is not None and value != "":
                return value
        return None

    def _parse_paths(self, raw_paths: Any) -> Paths:
        """Keep parts with at least two finite vertices"""
        if not raw_paths:
            return ()

        parts = []
        for raw_path in raw_paths:
            vertices = []
            for coord in raw_path or []:
                if len(coord) < 2:
                    continue
                lng = self._safe_float(coord[0])
                lat = self._safe_float(coord[1])
                if lng is None or lat is None:
                    continue
                vertices.append((lng, lat))
            if len(vertices) >= 2:
                parts.append(tuple(vertices))
        return tuple(parts)

    def _direction(self, value: Any) -> Optional[str]:
        if not value:
            return None
        code = str(value).strip().upper()
        return code if code in DIRECTION_BEARINGS else None

    def _text(self, value: Any) -> str:
        return str(value).strip() if value is not None else ""

    def _safe_float(self, value: Any) -> Optional[float]:
        """Safely convert value to a finite float"""
        if value is None:
            return None
        try:
            result = float(value)
        except (ValueError, TypeError):
            return None
        return result if math.isfinite(result) else None
