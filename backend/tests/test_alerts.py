"""Tests for driving alerts and the driving session"""
from datetime import datetime
import pytest

# Add parent directory to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cameras import build_camera_segment_index
from matching import ScheduleIndex, ScheduleMatcher
from schedules import ScheduleEntry
from status import LaneStatusEvaluator
from tracking import AlertEngine, CurrentSegment, DrivingSession, GpsSample, SegmentTracker
from tracking.session import PERMISSION_DENIED, TIMEOUT
from factories import make_camera, make_segment, offset

SUNDAY_NOON = datetime(2026, 10, 18, 12, 0)


def make_evaluator(all_week=True):
    row = {"street": "אבן גבירול", "section": "מקטע"}
    if all_week:
        row["allWeek"] = True
    else:
        row["sun_thu"] = [[7, 9]]
    return LaneStatusEvaluator(ScheduleMatcher(ScheduleIndex([ScheduleEntry.from_dict(row)])))


class TestAlertEngine:

    def setup_method(self):
        self.lane = make_segment(1, ((0, 0), (0, 200)), to_street="ז'בוטינסקי")
        self.next_lane = make_segment(2, ((0, 200), (0, 400)), from_street="ז'בוטינסקי")
        self.cameras = [
            make_camera(10, 3, 150),
            make_camera(11, 3, 260),
        ]
        self.fired = []
        self.engine = self.make_engine(self.cameras)
        self.engine.enabled = True
        self.position = offset(1, 100)
        self.current = CurrentSegment(self.lane, 1.0, 0.0)

    def make_engine(self, cameras, all_week=True):
        index = build_camera_segment_index([self.lane, self.next_lane], cameras)
        return AlertEngine(make_evaluator(all_week), index, cameras, on_alert=self.fired.append)

    def process(self, now_ts, engine=None, next_segment="default"):
        if next_segment == "default":
            next_segment = self.next_lane
        engine = engine or self.engine
        return engine.process(*self.position, self.current, next_segment, SUNDAY_NOON, now_ts)

    def test_disabled_by_default(self):
        engine = self.make_engine(self.cameras)
        assert not engine.enabled
        assert self.process(0, engine) == []

    def test_camera_index_filled_after_construction(self):
        index = {}
        engine = AlertEngine(make_evaluator(), index, self.cameras, on_alert=self.fired.append)
        engine.enabled = True
        assert engine.camera_index is index

        index.update(build_camera_segment_index([self.lane, self.next_lane], self.cameras))
        assert "camera" in [a.kind for a in self.process(0, engine)]

    def test_no_current_segment(self):
        assert self.engine.process(*self.position, None, None, SUNDAY_NOON, 0) == []

    def test_blocked_lane_and_camera(self):
        alerts = self.process(0)
        assert [a.kind for a in alerts] == ["lane", "camera"]

        lane_alert, camera_alert = alerts
        assert lane_alert.key == "lane_1"
        assert "אבן גבירול" in lane_alert.message
        assert camera_alert.key == "cam_10"
        assert camera_alert.camera_id == 10
        assert camera_alert.distance == pytest.approx(50, abs=1)
        assert self.fired == alerts

    def test_cooldown(self):
        assert len(self.process(0)) == 2
        assert self.process(10) == []
        assert self.process(299) == []
        assert len(self.process(300)) == 2

    def test_reset_clears_cooldown(self):
        self.process(0)
        self.engine.reset()
        assert len(self.process(1)) == 2

    def test_open_lane_only_warns_about_camera(self):
        engine = self.make_engine(self.cameras, all_week=False)
        engine.enabled = True
        alerts = self.process(0, engine)
        assert [a.kind for a in alerts] == ["camera"]

    def test_camera_on_next_segment(self):
        self.position = offset(1, 190)
        alerts = self.process(0)
        assert [a.camera_id for a in alerts if a.kind == "camera"] == [10]
        alerts = self.process(1)
        assert [a.camera_id for a in alerts if a.kind == "camera"] == [11]

    def test_next_segment_cameras_need_next_segment(self):
        self.position = offset(1, 190)
        self.process(0)
        alerts = self.process(1, next_segment=None)
        assert [a for a in alerts if a.kind == "camera"] == []

    def test_one_camera_alert_per_update(self):
        cameras = [make_camera(20, 3, 140), make_camera(21, 3, 120)]
        engine = self.make_engine(cameras)
        engine.enabled = True

        first = [a.camera_id for a in self.process(0, engine) if a.kind == "camera"]
        second = [a.camera_id for a in self.process(1, engine) if a.kind == "camera"]
        assert first == [21]
        assert second == [20]

    def test_inactive_camera_is_ignored(self):
        cameras = [make_camera(30, 3, 120, status="מושבת")]
        engine = self.make_engine(cameras)
        engine.enabled = True
        assert [a.kind for a in self.process(0, engine)] == ["lane"]

    def test_site_number_shared_cooldown(self):
        cameras = [make_camera(40, 3, 120, site_number="S1"), make_camera(41, 3, 140, site_number="S1")]
        engine = self.make_engine(cameras)
        engine.enabled = True
        self.process(0, engine)
        assert [a.kind for a in self.process(1, engine)] == []


class TestDrivingSession:

    def setup_method(self):
        self.segments = [
            make_segment(1, ((0, 0), (0, 200)), to_street="ז'בוטינסקי"),
            make_segment(2, ((0, 200), (0, 400)), from_street="ז'בוטינסקי"),
        ]
        self.cameras = [make_camera(10, 3, 60)]
        self.engine = AlertEngine(
            make_evaluator(),
            build_camera_segment_index(self.segments, self.cameras),
            self.cameras,
        )
        self.session = DrivingSession(SegmentTracker(self.segments), self.engine)

    def fix(self, east, north, t):
        lat, lng = offset(east, north)
        return GpsSample(lat=lat, lng=lng, accuracy=5, timestamp=t)

    def test_inactive_until_started(self):
        assert self.session.on_position(self.fix(1, 50, 0)) is None

    def test_start_without_location(self):
        assert not self.session.start(available=False)
        assert not self.session.active

    def test_tracks_current_and_next_segment(self):
        self.session.start()
        update = self.session.on_position(self.fix(1, 50, 0), now=SUNDAY_NOON)

        assert update.current.segment.segment_id == 1
        assert update.next_segment.segment_id == 2
        assert update.heading == 0
        # Alerts are opt-in
        assert update.alerts == []

    def test_alerts_when_enabled(self):
        self.engine.enabled = True
        self.session.start()
        update = self.session.on_position(self.fix(1, 50, 0), now=SUNDAY_NOON)
        assert sorted(a.kind for a in update.alerts) == ["camera", "lane"]

    def test_off_lane(self):
        self.session.start()
        update = self.session.on_position(self.fix(500, 50, 0))
        assert update.current is None
        assert update.next_segment is None
        assert update.heading is None

    def test_permission_denied_stops(self):
        self.session.start()
        self.session.on_position(self.fix(1, 50, 0))
        self.session.on_error(TIMEOUT, "timed out")
        assert self.session.active

        self.session.on_error(PERMISSION_DENIED, "denied")
        assert not self.session.active
        assert self.session.current is None
        assert self.session.heading is None

    def test_stop_resets_alert_cooldown(self):
        self.engine.enabled = True
        self.session.start()
        assert self.session.on_position(self.fix(1, 50, 0), now=SUNDAY_NOON).alerts
        self.session.stop()
        self.session.start()
        assert self.session.on_position(self.fix(1, 50, 1), now=SUNDAY_NOON).alerts

    def test_update_tracker(self):
        self.session.start()
        self.session.on_position(self.fix(1, 50, 0))
        self.session.update_tracker(SegmentTracker([]))
        assert self.session.current is None
        update = self.session.on_position(self.fix(1, 50, 1))
        assert update.current is None
