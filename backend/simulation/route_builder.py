"""
Driving simulator: turn a hand-picked route into a drivable path and replay
it as GPS fixes, so tracking and alerts can be exercised without a device.

A route is a list of items, each a bus lane segment (driven in its traffic
direction) or a free waypoint. Gaps between consecutive items can be filled
with road-following connectors from the routing service.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from config import SIM_CONNECTOR_MIN_GAP, SIM_MIN_POINT_SPACING, SIM_SPEED_KMH
from geometry import distance_m, points_in_traffic_order
from tracking.gps_filter import GpsSample
from tracking.session import DrivingSession, TrackingUpdate
from transformers.feature_transformer import RoadSegment

logger = logging.getLogger(__name__)

LatLng = Tuple[float, float]


@dataclass
class RouteItem:
    segment: Optional[RoadSegment] = None
    waypoint: Optional[LatLng] = None
    connector: List[LatLng] = field(default_factory=list)  # path to the next item

    def __post_init__(self):
        if (self.segment is None) == (self.waypoint is None):
            raise ValueError("RouteItem needs exactly one of segment or waypoint")

    @property
    def kind(self) -> str:
        return "segment" if self.segment is not None else "waypoint"

    def points(self) -> List[LatLng]:
        if self.segment is None:
            return [self.waypoint]
        return points_in_traffic_order(self.segment.direction, self.segment.paths)

    @property
    def start(self) -> Optional[LatLng]:
        pts = self.points()
        return pts[0] if pts else None

    @property
    def end(self) -> Optional[LatLng]:
        pts = self.points()
        return pts[-1] if pts else None


async def fetch_connectors(items: Sequence[RouteItem], route_fetcher,
                           min_gap: float = SIM_CONNECTOR_MIN_GAP):
    """Ask the routing service to join items that are at least min_gap apart"""
    for current, following in zip(items, items[1:]):
        current.connector = []
        end, start = current.end, following.start
        if end is None or start is None:
            continue
        if distance_m(end[0], end[1], start[0], start[1]) < min_gap:
            continue
        current.connector = await route_fetcher.fetch(end, start)
        if not current.connector:
            logger.warning(f"No connector between {end} and {start}; driving straight")


def build_route_path(items: Sequence[RouteItem],
                     min_spacing: float = SIM_MIN_POINT_SPACING) -> List[LatLng]:
    path: List[LatLng] = []

    def add_point(pt: LatLng):
        if path and distance_m(path[-1][0], path[-1][1], pt[0], pt[1]) < min_spacing:
            return
        path.append(pt)

    for item in items:
        for pt in item.points():
            add_point(pt)
        for pt in item.connector:
            add_point(pt)

    return path


def cumulative_distances(path: Sequence[LatLng]) -> List[float]:
    if not path:
        return []
    dists = [0.0]
    for prev, pt in zip(path, path[1:]):
        dists.append(dists[-1] + distance_m(prev[0], prev[1], pt[0], pt[1]))
    return dists


def interpolate_on_path(path: Sequence[LatLng], cum_dists: Sequence[float],
                        distance: float) -> LatLng:
    """Point `distance` metres along the path, clamped to its ends"""
    if distance <= 0:
        return path[0]
    if distance >= cum_dists[-1]:
        return path[-1]

    for i in range(1, len(cum_dists)):
        if cum_dists[i] >= distance:
            seg_len = cum_dists[i] - cum_dists[i - 1]
            t = (distance - cum_dists[i - 1]) / seg_len if seg_len > 0 else 0.0
            lat = path[i - 1][0] + t * (path[i][0] - path[i - 1][0])
            lng = path[i - 1][1] + t * (path[i][1] - path[i - 1][1])
            return lat, lng
    return path[-1]


class DrivingSimulator:
    """Moves along a path at constant speed and feeds fixes to a DrivingSession"""

    def __init__(
        self,
        path: Sequence[LatLng],
        session: DrivingSession,
        speed_kmh: float = SIM_SPEED_KMH,
        accuracy: float = 5.0,
        start_ts: float = 0.0,
    ):
        if len(path) < 2:
            raise ValueError("Simulation path needs at least two points")
        self.path = list(path)
        self.cum_dists = cumulative_distances(self.path)
        self.total_distance = self.cum_dists[-1]
        self.session = session
        self.speed_mps = speed_kmh / 3.6
        self.accuracy = accuracy
        self.travelled = 0.0
        self.clock = start_ts

    @property
    def finished(self) -> bool:
        return self.travelled >= self.total_distance

    def step(self, dt: float) -> Optional[TrackingUpdate]:
        """Advance dt seconds; None once the end of the path is reached"""
        if self.finished:
            return None
        self.travelled = min(self.travelled + self.speed_mps * dt, self.total_distance)
        self.clock += dt
        lat, lng = interpolate_on_path(self.path, self.cum_dists, self.travelled)
        return self.session.on_position(GpsSample(lat, lng, self.accuracy, self.clock))

    def run(self, dt: float = 1.0) -> Iterator[TrackingUpdate]:
        if not self.session.active:
            self.session.start()
        logger.info(
            f"Simulating {self.total_distance:.0f} m at {self.speed_mps * 3.6:.0f} km/h"
        )
        while not self.finished:
            update = self.step(dt)
            if update is not None:
                yield update
