"""Proximity alerts while driving: blocked lane ahead, enforcement camera nearby"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from cameras.assignment import CameraAssignment, cameras_on_segments
from config import ALERT_COOLDOWN_SECONDS, CAMERA_ALERT_RADIUS
from geometry import distance_m
from status.lane_status import LaneStatusEvaluator
from transformers.feature_transformer import CameraPoint, FeatureId, RoadSegment
from .segment_tracker import CurrentSegment

logger = logging.getLogger(__name__)

UNKNOWN_STREET = "לא ידוע"


@dataclass(frozen=True)
class Alert:
    kind: str  # lane | camera
    key: str
    message: str
    segment_id: Optional[FeatureId] = None
    camera_id: Optional[FeatureId] = None
    distance: Optional[float] = None


class AlertEngine:
    """
    Emits at most one lane alert and one camera alert per position update.
    Each alert key (lane_<segment>, cam_<site>) has its own cooldown, so lane
    and camera alerts never suppress each other.
    """

    def __init__(
        self,
        evaluator: LaneStatusEvaluator,
        camera_index: Dict[FeatureId, CameraAssignment] = None,
        cameras: Sequence[CameraPoint] = (),
        cooldown: float = ALERT_COOLDOWN_SECONDS,
        on_alert: Callable[[Alert], None] = None,
    ):
        self.evaluator = evaluator
        self.camera_index = camera_index if camera_index is not None else {}
        self.cameras = list(cameras)
        self.cooldown = cooldown
        self.on_alert = on_alert
        self.enabled = False
        self._last_fired: Dict[str, float] = {}

    def update_cameras(self, camera_index: Dict[FeatureId, CameraAssignment],
                       cameras: Sequence[CameraPoint]):
        self.camera_index = camera_index
        self.cameras = list(cameras)

    def reset(self):
        self._last_fired.clear()

    def _cooled_down(self, key: str, now_ts: float) -> bool:
        last = self._last_fired.get(key)
        return last is None or now_ts - last >= self.cooldown

    def _fire(self, alert: Alert, now_ts: float) -> Alert:
        self._last_fired[alert.key] = now_ts
        logger.info(f"Alert [{alert.kind}] {alert.message}")
        if self.on_alert is not None:
            self.on_alert(alert)
        return alert

    def process(
        self,
        lat: float,
        lng: float,
        current: Optional[CurrentSegment],
        next_segment: Optional[RoadSegment],
        now: datetime,
        now_ts: float,
    ) -> List[Alert]:
        if not self.enabled or current is None:
            return []

        alerts = []
        segment = current.segment

        status = self.evaluator.evaluate(segment, now)
        if status.blocked:
            key = f"lane_{segment.segment_id}"
            if self._cooled_down(key, now_ts):
                street = segment.street_name or UNKNOWN_STREET
                alerts.append(self._fire(Alert(
                    kind="lane",
                    key=key,
                    message=f"זהירות! נתיב תחבורה ציבורית אסור לנסיעה ברחוב {street}",
                    segment_id=segment.segment_id,
                ), now_ts))

        camera_alert = self._camera_alert(lat, lng, segment, next_segment, now_ts)
        if camera_alert is not None:
            alerts.append(camera_alert)

        return alerts

    def _camera_alert(self, lat, lng, segment, next_segment, now_ts) -> Optional[Alert]:
        segment_ids = [segment.segment_id]
        if next_segment is not None:
            segment_ids.append(next_segment.segment_id)

        in_range = []
        for camera in cameras_on_segments(self.camera_index, self.cameras, segment_ids):
            if not camera.is_active:
                continue
            dist = distance_m(lat, lng, camera.lat, camera.lng)
            if dist <= CAMERA_ALERT_RADIUS:
                in_range.append((dist, camera))
        in_range.sort(key=lambda item: item[0])

        for dist, camera in in_range:
            key = f"cam_{camera.alert_key}"
            if not self._cooled_down(key, now_ts):
                continue
            street = camera.street_name or camera.name or UNKNOWN_STREET
            return self._fire(Alert(
                kind="camera",
                key=key,
                message=f"זהירות! מצלמת אכיפת נתיב תחבורה ציבורית ברחוב {street}, {round(dist)} מטרים",
                segment_id=segment.segment_id,
                camera_id=camera.camera_id,
                distance=dist,
            ), now_ts)

        return None
