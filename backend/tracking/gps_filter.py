"""Low-pass filter for raw GPS fixes: smoothed position, speed and bearing"""
import logging
from dataclasses import dataclass
from typing import Optional

from config import (
    GPS_GOOD_ACCURACY,
    GPS_LP_ALPHA,
    GPS_MIN_MOVE_METERS,
    GPS_MIN_SPEED_FOR_HEADING,
)
from geometry import bearing_between, distance_m

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GpsSample:
    lat: float
    lng: float
    accuracy: float   # metres
    timestamp: float  # seconds


@dataclass(frozen=True)
class FilteredPosition:
    lat: float
    lng: float
    speed: float              # m/s, smoothed
    bearing: Optional[float]  # degrees, smoothed; None until the first real movement
    accuracy: float
    timestamp: float


class GpsFilter:
    """
    Exponential moving average over the fixes. Fixes with poor accuracy get
    half the weight. Speed is derived from consecutive filtered positions;
    moves shorter than min_move count as standing still. The bearing only
    follows the movement once the smoothed speed reaches min_heading_speed.
    """

    def __init__(
        self,
        alpha: float = GPS_LP_ALPHA,
        good_accuracy: float = GPS_GOOD_ACCURACY,
        min_move: float = GPS_MIN_MOVE_METERS,
        min_heading_speed: float = GPS_MIN_SPEED_FOR_HEADING,
    ):
        self.alpha = alpha
        self.good_accuracy = good_accuracy
        self.min_move = min_move
        self.min_heading_speed = min_heading_speed
        self.reset()

    def reset(self):
        self.lat: Optional[float] = None
        self.lng: Optional[float] = None
        self.speed = 0.0
        self.bearing: Optional[float] = None
        # Last position/time used as the origin of a speed measurement
        self._anchor_lat: Optional[float] = None
        self._anchor_lng: Optional[float] = None
        self._anchor_time: Optional[float] = None

    @property
    def is_moving(self) -> bool:
        return self.speed >= self.min_heading_speed

    def update(self, sample: GpsSample) -> FilteredPosition:
        if self.lat is None:
            self.lat = sample.lat
            self.lng = sample.lng
        else:
            alpha = self.alpha if sample.accuracy < self.good_accuracy else self.alpha * 0.5
            self.lat += alpha * (sample.lat - self.lat)
            self.lng += alpha * (sample.lng - self.lng)

        self._update_speed_and_bearing(sample.timestamp)

        return FilteredPosition(
            lat=self.lat,
            lng=self.lng,
            speed=self.speed,
            bearing=self.bearing,
            accuracy=sample.accuracy,
            timestamp=sample.timestamp,
        )

    def _update_speed_and_bearing(self, now: float):
        if self._anchor_lat is None:
            self._set_anchor(now)
            return

        dt = now - self._anchor_time
        if dt <= 0:
            return

        dist = distance_m(self._anchor_lat, self._anchor_lng, self.lat, self.lng)
        if dist < self.min_move:
            # Jitter: standing still for this sample
            self.speed += self.alpha * (0.0 - self.speed)
            return

        instant_speed = dist / dt
        if self.speed == 0:
            self.speed = instant_speed
        else:
            self.speed += self.alpha * (instant_speed - self.speed)

        if self.speed >= self.min_heading_speed:
            raw_bearing = bearing_between(self._anchor_lat, self._anchor_lng, self.lat, self.lng)
            if self.bearing is None:
                self.bearing = raw_bearing
            else:
                diff = raw_bearing - self.bearing
                if diff > 180:
                    diff -= 360
                elif diff < -180:
                    diff += 360
                self.bearing = (self.bearing + self.alpha * diff + 360) % 360

        self._set_anchor(now)

    def _set_anchor(self, now: float):
        self._anchor_lat = self.lat
        self._anchor_lng = self.lng
        self._anchor_time = now
