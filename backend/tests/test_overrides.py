"""Tests for the community report store and the sign override index"""
import json
import pytest

# Add parent directory to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from reports import (
    REPORT_TYPE_CAMERA,
    STATUS_DECODED,
    STATUS_PENDING,
    CommunityReport,
    DecodedHours,
    OverrideIndex,
    ReportStore,
)
from factories import make_segment


class Clock:
    """Monotonic ISO timestamps, one second apart"""

    def __init__(self):
        self.tick = 0

    def __call__(self):
        self.tick += 1
        return f"2026-10-01T10:{self.tick // 60:02d}:{self.tick % 60:02d}+00:00"


MORNING = DecodedHours(sun_thu=((7.0, 10.0),))
EVENING = DecodedHours(sun_thu=((16.0, 19.0),))


class TestReportStore:

    def setup_method(self):
        self.clock = Clock()

    def make_store(self, tmp_path):
        return ReportStore(tmp_path / "reports.json", clock=self.clock)

    def test_add_assigns_id_and_timestamps(self, tmp_path):
        store = self.make_store(tmp_path)
        report = store.add(CommunityReport(street="אבן גבירול", notes="שלט חדש"))

        assert report.id
        assert report.timestamp == report.updated_at
        assert report.status == STATUS_PENDING
        assert store.get(report.id) is report

    def test_ids_are_unique(self, tmp_path):
        store = self.make_store(tmp_path)
        ids = {store.add(CommunityReport(street="x")).id for _ in range(20)}
        assert len(ids) == 20

    def test_persists_across_instances(self, tmp_path):
        store = self.make_store(tmp_path)
        report = store.add(CommunityReport(street="אבן גבירול", lat=32.08, lng=34.78))
        store.decode(report.id, EVENING, segment_ids=[17])

        reloaded = self.make_store(tmp_path)
        loaded = reloaded.get(report.id)
        assert loaded.status == STATUS_DECODED
        assert loaded.decoded_hours == EVENING
        assert loaded.segment_ids == [17]
        assert loaded.lat == 32.08

    def test_accepts_bare_list_file(self, tmp_path):
        path = tmp_path / "reports.json"
        path.write_text(json.dumps([{"id": "a1", "street": "דיזנגוף"}]), encoding="utf-8")
        store = ReportStore(path)
        assert [r.id for r in store.all()] == ["a1"]
        assert store.tombstones == {}

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "reports.json"
        path.write_text("{not json", encoding="utf-8")
        store = ReportStore(path)
        assert store.all() == []

    def test_unknown_fields_are_preserved(self, tmp_path):
        path = tmp_path / "reports.json"
        path.write_text(json.dumps({"reports": [{"id": "a1", "street": "x", "device": "ios"}]}),
                        encoding="utf-8")
        store = ReportStore(path, clock=self.clock)
        store.update("a1", notes="edited")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["reports"][0]["device"] == "ios"
        assert data["reports"][0]["notes"] == "edited"

    def test_update_bumps_updated_at(self, tmp_path):
        store = self.make_store(tmp_path)
        report = store.add(CommunityReport(street="x"))
        updated = store.update(report.id, notes="n")
        assert updated.updated_at > report.updated_at
        assert updated.timestamp == report.timestamp

    def test_update_rejects_unknown_fields(self, tmp_path):
        store = self.make_store(tmp_path)
        report = store.add(CommunityReport(street="x"))
        with pytest.raises(ValueError):
            store.update(report.id, colour="red")

    def test_update_missing_report(self, tmp_path):
        assert self.make_store(tmp_path).update("nope", notes="n") is None

    def test_delete_leaves_tombstone(self, tmp_path):
        store = self.make_store(tmp_path)
        report = store.add(CommunityReport(street="x"))

        assert store.delete(report.id)
        assert store.get(report.id) is None
        assert report.id in store.tombstones
        assert not store.delete(report.id)

        assert report.id in self.make_store(tmp_path).tombstones

    def test_reports_for_street(self, tmp_path):
        store = self.make_store(tmp_path)
        store.add(CommunityReport(street="אבן גבירול"))
        store.add(CommunityReport(street="דיזנגוף"))

        assert len(store.reports_for_street("אבן גבירול")) == 1
        assert len(store.reports_for_street("רחוב אבן גבירול")) == 1
        assert store.reports_for_street("") == []

    def test_subscribers_receive_full_list(self, tmp_path):
        store = self.make_store(tmp_path)
        seen = []
        store.subscribe(lambda reports: seen.append(len(reports)))
        store.add(CommunityReport(street="a"))
        store.add(CommunityReport(street="b"))
        assert seen == [1, 2]


class TestOverrideIndex:

    def setup_method(self):
        self.clock = Clock()

    def make_store(self, tmp_path):
        return ReportStore(tmp_path / "reports.json", clock=self.clock)

    def decoded(self, store, street, hours, segment_ids=None):
        report = store.add(CommunityReport(street=street))
        return store.decode(report.id, hours, segment_ids=segment_ids)

    def test_pending_reports_are_ignored(self, tmp_path):
        store = self.make_store(tmp_path)
        store.add(CommunityReport(street="אבן גבירול"))
        index = OverrideIndex().attach(store)
        assert len(index) == 0
        assert index.find_override(make_segment(1)) is None

    def test_camera_direction_reports_are_ignored(self, tmp_path):
        store = self.make_store(tmp_path)
        index = OverrideIndex().attach(store)
        report = store.add(CommunityReport(type=REPORT_TYPE_CAMERA, street="אבן גבירול", camera_id=7))
        store.decode(report.id, EVENING)
        assert len(index) == 0
        assert index.find_override(make_segment(1)) is None

    def test_street_override(self, tmp_path):
        store = self.make_store(tmp_path)
        index = OverrideIndex().attach(store)
        report = self.decoded(store, "אבן גבירול", EVENING)

        override = index.find_override(make_segment(1))
        assert override is not None
        assert override.hours == EVENING
        assert override.report_id == report.id

    def test_segment_override_is_scoped(self, tmp_path):
        store = self.make_store(tmp_path)
        index = OverrideIndex().attach(store)
        self.decoded(store, "אבן גבירול", MORNING, segment_ids=[1])

        assert index.find_override(make_segment(1)).hours == MORNING
        # Same street, different segment: the report was tied to segment 1 only
        assert index.find_override(make_segment(2)) is None

    def test_segment_id_type_is_ignored(self, tmp_path):
        store = self.make_store(tmp_path)
        index = OverrideIndex().attach(store)
        self.decoded(store, "אבן גבירול", MORNING, segment_ids=["7"])
        assert index.find_override(make_segment(7)).hours == MORNING

    def test_latest_report_wins(self, tmp_path):
        store = self.make_store(tmp_path)
        index = OverrideIndex().attach(store)
        self.decoded(store, "אבן גבירול", MORNING)
        self.decoded(store, "אבן גבירול", EVENING)
        assert index.find_override(make_segment(1)).hours == EVENING

    def test_normalized_street_match(self, tmp_path):
        store = self.make_store(tmp_path)
        index = OverrideIndex().attach(store)
        self.decoded(store, "רחוב אבן גבירול", EVENING)
        assert index.find_override(make_segment(1)).hours == EVENING

    def test_alias_street_match(self, tmp_path):
        store = self.make_store(tmp_path)
        index = OverrideIndex().attach(store)
        self.decoded(store, "דרך בגין", EVENING)
        segment = make_segment(1, street="דרך בגין מנחם")
        assert index.find_override(segment).hours == EVENING

    def test_deleting_report_removes_override(self, tmp_path):
        store = self.make_store(tmp_path)
        index = OverrideIndex().attach(store)
        report = self.decoded(store, "אבן גבירול", EVENING)
        store.delete(report.id)
        assert index.find_override(make_segment(1)) is None

    def test_rebuild_from_list(self):
        reports = [
            CommunityReport(id="a", street="דיזנגוף", status=STATUS_DECODED,
                            decoded_hours=MORNING, timestamp="2026-01-01T00:00:00+00:00"),
            CommunityReport(id="b", street="דיזנגוף", status=STATUS_PENDING,
                            decoded_hours=EVENING, timestamp="2026-02-01T00:00:00+00:00"),
        ]
        index = OverrideIndex(reports)
        assert index.find_override(make_segment(1, street="דיזנגוף")).report_id == "a"

    def test_latest_by_instant_across_formats(self):
        # 10:00:00.013Z is earlier than 10:00:00.013570+00:00 but sorts after it as text
        reports = [
            CommunityReport(id="python", street="דיזנגוף", status=STATUS_DECODED,
                            decoded_hours=EVENING, timestamp="2026-10-01T10:00:00.013570+00:00"),
            CommunityReport(id="browser", street="דיזנגוף", status=STATUS_DECODED,
                            decoded_hours=MORNING, timestamp="2026-10-01T10:00:00.013Z"),
        ]
        index = OverrideIndex(reports)
        assert index.find_override(make_segment(1, street="דיזנגוף")).report_id == "python"
