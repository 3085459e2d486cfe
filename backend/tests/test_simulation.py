"""Tests for the driving simulator"""
import math
import pytest

# Add parent directory to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from geometry import distance_m
from simulation import (
    DrivingSimulator,
    RouteItem,
    build_route_path,
    cumulative_distances,
    fetch_connectors,
    interpolate_on_path,
)
from tracking import DrivingSession, SegmentTracker
from factories import make_segment, offset


class FakeRouteFetcher:
    def __init__(self, points=None):
        self.points = points
        self.calls = []

    async def fetch(self, start, end):
        self.calls.append((start, end))
        if self.points is None:
            return []
        return list(self.points)


class TestRouteItems:

    def test_needs_exactly_one_target(self):
        with pytest.raises(ValueError):
            RouteItem()
        with pytest.raises(ValueError):
            RouteItem(segment=make_segment(1), waypoint=offset(0, 0))

    def test_segment_points_follow_traffic(self):
        # Northbound lane digitized north to south
        item = RouteItem(segment=make_segment(1, ((0, 200), (0, 0)), direction="N"))
        assert item.kind == "segment"
        assert item.start == pytest.approx(offset(0, 0))
        assert item.end == pytest.approx(offset(0, 200))

    def test_waypoint(self):
        item = RouteItem(waypoint=offset(10, 10))
        assert item.kind == "waypoint"
        assert item.start == item.end == offset(10, 10)


class TestRoutePath:

    def test_build_route_path_drops_close_points(self):
        items = [
            RouteItem(segment=make_segment(1)),
            RouteItem(waypoint=offset(0, 201)),
            RouteItem(waypoint=offset(0, 300)),
        ]
        path = build_route_path(items)
        assert len(path) == 3
        assert cumulative_distances(path) == pytest.approx([0, 200, 300], abs=0.1)

    def test_interpolate(self):
        path = [offset(0, 0), offset(0, 100), offset(0, 300)]
        dists = cumulative_distances(path)

        lat, lng = interpolate_on_path(path, dists, 200)
        assert distance_m(lat, lng, *offset(0, 200)) < 0.5
        assert interpolate_on_path(path, dists, -5) == path[0]
        assert interpolate_on_path(path, dists, 1000) == path[-1]

    def test_cumulative_distances_empty(self):
        assert cumulative_distances([]) == []

    @pytest.mark.asyncio
    async def test_fetch_connectors(self):
        bend = offset(50, 250)
        fetcher = FakeRouteFetcher([bend])
        items = [
            RouteItem(segment=make_segment(1)),
            RouteItem(waypoint=offset(0, 205)),
            RouteItem(waypoint=offset(100, 300)),
        ]
        await fetch_connectors(items, fetcher)

        # Only the second gap is wide enough to need the router
        assert len(fetcher.calls) == 1
        assert items[0].connector == []
        assert items[1].connector == [bend]
        assert bend in build_route_path(items)

    @pytest.mark.asyncio
    async def test_fetch_connectors_without_route(self):
        items = [RouteItem(waypoint=offset(0, 0)), RouteItem(waypoint=offset(0, 500))]
        await fetch_connectors(items, FakeRouteFetcher(None))
        assert items[0].connector == []
        assert len(build_route_path(items)) == 2


class TestDrivingSimulator:

    def setup_method(self):
        self.segment = make_segment(1, to_street="ז'בוטינסקי")
        self.session = DrivingSession(SegmentTracker([self.segment]))

    def test_path_needs_two_points(self):
        with pytest.raises(ValueError):
            DrivingSimulator([offset(0, 0)], self.session)

    def test_run_drives_the_route(self):
        path = build_route_path([RouteItem(segment=self.segment)])
        simulator = DrivingSimulator(path, self.session, speed_kmh=36)

        updates = list(simulator.run(dt=1.0))

        assert self.session.active
        assert len(updates) == math.ceil(simulator.total_distance / 10)
        assert simulator.finished
        assert simulator.step(1.0) is None
        assert all(u.current is not None for u in updates)
        assert updates[-1].current.segment.segment_id == 1
        assert updates[-1].position.speed > 0
        assert updates[-1].position.timestamp == pytest.approx(len(updates))
