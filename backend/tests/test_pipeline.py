"""Tests for the status pipeline"""
import asyncio
import gzip
import json
from datetime import datetime
import pytest

# Add parent directory to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import aiohttp

from errors import FeatureServiceError, ScheduleTableError
from pipeline import BusLanePipeline, run_pipeline
from reports import CommunityReport, DecodedHours, ReportStore
from factories import offset, vertex

SUNDAY_MORNING = datetime(2026, 10, 18, 10, 0)


def lane_feature(oid, east, street="אבן גבירול", direction="N"):
    return {
        "attributes": {
            "oid": oid, "street_name": street, "direction_name": direction,
            "from_street": "", "to_street": "", "status": "פעיל",
        },
        "geometry": {"paths": [[list(vertex(east, 0)), list(vertex(east, 200))]]},
    }


def camera_feature(oid, east, north, street="אבן גבירול"):
    lat, lng = offset(east, north)
    return {"attributes": {"oid": oid, "t_rechov1": street}, "geometry": {"x": lng, "y": lat}}


def fake_fetcher(features=None, error=None):
    """Factory with the fetcher interface: async context manager + fetch()"""

    class FakeFetcher:
        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc_val, exc_tb):
            return False

        async def fetch(self):
            if error is not None:
                raise error
            return list(features or [])

    return FakeFetcher


LANES = [lane_feature(1, 0), lane_feature(2, 300, street="רחוב לא מוכר")]
CAMERAS = [camera_feature(10, 3, 100)]


class TestBusLanePipeline:

    def make_pipeline(self, tmp_path, lanes=LANES, cameras=CAMERAS, **kwargs):
        kwargs.setdefault("lanes_fetcher", fake_fetcher(lanes))
        kwargs.setdefault("cameras_fetcher", fake_fetcher(cameras))
        return BusLanePipeline(
            store=ReportStore(tmp_path / "reports.json"),
            output_dir=tmp_path / "output",
            **kwargs,
        )

    def test_empty_schedule_table_is_fatal(self, tmp_path):
        with pytest.raises(ScheduleTableError):
            self.make_pipeline(tmp_path, schedule_rows=[])

    def test_invalid_schedule_table_is_fatal(self, tmp_path):
        rows = [{"street": "אבן גבירול", "section": "", "sun_thu": [[7, 30]]}]
        with pytest.raises(ScheduleTableError):
            self.make_pipeline(tmp_path, schedule_rows=rows)

    @pytest.mark.asyncio
    async def test_refresh(self, tmp_path):
        """Test a refresh builds segments, cameras and the camera index"""
        pipeline = self.make_pipeline(tmp_path)

        assert await pipeline.refresh()

        snapshot = pipeline.snapshot
        assert [s.segment_id for s in snapshot.segments] == [1, 2]
        assert snapshot.camera_index[10].segment_ids == [1]
        assert snapshot.tracker.find_current_segment(*offset(1, 50)).segment.segment_id == 1
        assert pipeline.run_stats["last_refresh_ok"] is True
        assert pipeline.run_stats["matching"]["unmatched_streets"] == ["רחוב לא מוכר"]

    @pytest.mark.asyncio
    async def test_statuses(self, tmp_path):
        pipeline = self.make_pipeline(tmp_path)
        await pipeline.refresh()

        statuses, counts = pipeline.statuses(SUNDAY_MORNING)
        assert statuses[1].category == "blocked"
        assert statuses[2].category == "unknown"
        assert counts == {"unknown": 1, "blocked": 1, "open": 0}

    def test_statuses_before_first_refresh(self, tmp_path):
        statuses, counts = self.make_pipeline(tmp_path).statuses(SUNDAY_MORNING)
        assert statuses == {}
        assert sum(counts.values()) == 0

    @pytest.mark.asyncio
    async def test_sign_override_reaches_status(self, tmp_path):
        pipeline = self.make_pipeline(tmp_path)
        await pipeline.refresh()

        report = pipeline.store.add(CommunityReport(street="אבן גבירול"))
        pipeline.store.decode(report.id, DecodedHours(sun_thu=((16.0, 19.0),)))

        statuses, _ = pipeline.statuses(SUNDAY_MORNING)
        assert statuses[1].category == "open"
        assert statuses[1].override.report_id == report.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        aiohttp.ClientConnectionError("down"),
        FeatureServiceError("Invalid query", code=400),
        RuntimeError("unexpected"),
    ])
    async def test_failed_refresh_keeps_snapshot(self, tmp_path, error):
        """Test a failed refresh leaves the previous snapshot in place"""
        pipeline = self.make_pipeline(tmp_path)
        assert await pipeline.refresh()
        previous = pipeline.snapshot

        pipeline.lanes_fetcher = fake_fetcher(error=error)
        assert not await pipeline.refresh()
        assert pipeline.snapshot is previous
        assert pipeline.run_stats["last_refresh_ok"] is False

    @pytest.mark.asyncio
    async def test_failed_fetch_waits_for_sibling(self, tmp_path):
        """Test the other feed finishes before its fetcher is closed"""
        events = []

        class SlowCameras:
            async def __aenter__(self):
                return self

            async def __aexit__(self, exc_type, exc_val, exc_tb):
                events.append("closed")
                return False

            async def fetch(self):
                await asyncio.sleep(0.05)
                events.append("fetched")
                return list(CAMERAS)

        pipeline = self.make_pipeline(
            tmp_path,
            lanes_fetcher=fake_fetcher(error=aiohttp.ClientConnectionError("down")),
            cameras_fetcher=SlowCameras,
        )
        assert not await pipeline.refresh()
        assert events == ["fetched", "closed"]

    @pytest.mark.asyncio
    async def test_empty_feed_is_rejected(self, tmp_path):
        pipeline = self.make_pipeline(tmp_path, lanes=[])
        assert not await pipeline.refresh()
        assert pipeline.snapshot is None

    @pytest.mark.asyncio
    async def test_write_output(self, tmp_path):
        pipeline = self.make_pipeline(tmp_path)
        await pipeline.refresh()

        path = pipeline.write_output(SUNDAY_MORNING)

        assert path.name == "bus_lanes_20261018.json"
        latest = tmp_path / "output" / "bus_lanes_latest.json"
        assert latest.exists()

        data = json.loads(latest.read_text(encoding="utf-8"))
        assert data["counts"] == {"unknown": 1, "blocked": 1, "open": 0}
        assert data["lanes"][0]["status"]["category"] == "blocked"
        assert data["cameras"][0]["assignment"]["segmentIds"] == [1]
        assert data["sync"] is None

    @pytest.mark.asyncio
    async def test_write_compressed_output(self, tmp_path):
        pipeline = self.make_pipeline(tmp_path, compress=True)
        await pipeline.refresh()

        path = pipeline.write_output(SUNDAY_MORNING)
        path = pipeline.write_output(SUNDAY_MORNING)

        assert path.name == "bus_lanes_20261018.json.gz"
        with gzip.open(path, "rt", encoding="utf-8") as f:
            assert len(json.load(f)["lanes"]) == 2

    @pytest.mark.asyncio
    async def test_run_pipeline(self, tmp_path):
        pipeline = self.make_pipeline(tmp_path)
        assert await run_pipeline(pipeline)
        assert list((tmp_path / "output").glob("bus_lanes_2*.json"))
        assert not await pipeline.sync_reports()
