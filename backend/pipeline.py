"""Bus lane status pipeline: fetch feeds, match schedules, write the status snapshot"""
import asyncio
import gzip
import json
import logging
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import aiohttp

from cameras import CameraAssignment, build_camera_segment_index
from config import COMPRESS_OUTPUT, OUTPUT_DIR, REPORTS_FILE, REPORTS_REPO
from errors import FeatureServiceError, ScheduleTableError
from fetchers import BusLanesFetcher, CamerasFetcher
from matching import ScheduleIndex, ScheduleMatcher
from reports import GitHubReportRemote, OverrideIndex, ReportStore, ReportSync
from schedules import SCHEDULE_VERSION, load_schedule_table
from status import LaneStatus, LaneStatusEvaluator
from tracking import SegmentTracker
from transformers import CameraPoint, FeatureTransformer, RoadSegment
from validators import DataValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LaneSnapshot:
    """One consistent view of the feeds; replaced as a whole on refresh"""
    segments: Tuple[RoadSegment, ...]
    cameras: Tuple[CameraPoint, ...]
    camera_index: Dict[Any, CameraAssignment]
    fetched_at: datetime
    tracker: SegmentTracker = field(compare=False, repr=False, default=None)


class BusLanePipeline:
    """
    Owns the schedule matcher, the community report store with its override
    index, the status evaluator and the current feed snapshot.
    """

    def __init__(
        self,
        schedule_rows: Optional[List[dict]] = None,
        store: Optional[ReportStore] = None,
        report_sync: Optional[ReportSync] = None,
        lanes_fetcher: Callable[[], BusLanesFetcher] = BusLanesFetcher,
        cameras_fetcher: Callable[[], CamerasFetcher] = CamerasFetcher,
        output_dir: Path = OUTPUT_DIR,
        compress: bool = COMPRESS_OUTPUT,
    ):
        self.validator = DataValidator()

        entries = load_schedule_table(schedule_rows)
        table_check = self.validator.validate_schedule_table(entries)
        if not table_check.is_valid:
            for error in table_check.errors:
                logger.error(f"  - {error}")
            raise ScheduleTableError(f"Schedule table invalid ({len(table_check.errors)} errors)")

        self.matcher = ScheduleMatcher(ScheduleIndex(entries))
        self.store = store if store is not None else ReportStore(REPORTS_FILE)
        self.overrides = OverrideIndex().attach(self.store)
        self.evaluator = LaneStatusEvaluator(self.matcher, self.overrides)

        if report_sync is None and REPORTS_REPO:
            report_sync = ReportSync(self.store, GitHubReportRemote())
        self.report_sync = report_sync

        self.lanes_fetcher = lanes_fetcher
        self.cameras_fetcher = cameras_fetcher
        self.output_dir = Path(output_dir)
        self.compress = compress
        self.snapshot: Optional[LaneSnapshot] = None
        self.run_stats = {
            "last_refresh": None,
            "last_refresh_ok": None,
            "transform": None,
            "matching": None,
            "validation": None,
        }

    async def refresh(self) -> bool:
        """
        Fetch lanes and cameras, rebuild derived indexes and swap in the new
        snapshot. On any failure the previous snapshot stays in place.
        """
        started = datetime.now(timezone.utc)
        self.run_stats["last_refresh"] = started
        logger.info("Refreshing bus lane and camera feeds...")

        try:
            async with self.lanes_fetcher() as lanes, self.cameras_fetcher() as cams:
                # Both fetches settle before the sessions close
                results = await asyncio.gather(
                    lanes.fetch(), cams.fetch(), return_exceptions=True
                )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            raw_lanes, raw_cameras = results

            transformer = FeatureTransformer()
            segments = transformer.transform_segments(raw_lanes)
            cameras = transformer.transform_cameras(raw_cameras)
            self.run_stats["transform"] = transformer.stats

            validation = self.validator.validate_snapshot(segments, cameras)
            self.run_stats["validation"] = validation
            if not validation.is_valid:
                logger.error("Snapshot validation failed, keeping previous snapshot:")
                for error in validation.errors:
                    logger.error(f"  - {error}")
                self.run_stats["last_refresh_ok"] = False
                return False
            for warning in validation.warnings:
                logger.warning(f"  - {warning}")

            if self.snapshot is not None:
                incremental = self.validator.validate_incremental(
                    segments, self.snapshot.segments, cameras, self.snapshot.cameras
                )
                for warning in incremental.warnings:
                    logger.warning(f"  - {warning}")

            camera_index = build_camera_segment_index(segments, cameras)
            self.run_stats["matching"] = self.matcher.match_stats(segments)

            self.snapshot = LaneSnapshot(
                segments=tuple(segments),
                cameras=tuple(cameras),
                camera_index=camera_index,
                fetched_at=started,
                tracker=SegmentTracker(segments),
            )

        except (aiohttp.ClientError, asyncio.TimeoutError, FeatureServiceError) as e:
            logger.error(f"Feed refresh failed, keeping previous snapshot: {e}")
            self.run_stats["last_refresh_ok"] = False
            return False
        except Exception as e:
            logger.exception(f"Feed refresh failed with error: {e}")
            self.run_stats["last_refresh_ok"] = False
            return False

        self.run_stats["last_refresh_ok"] = True
        duration = (datetime.now(timezone.utc) - started).total_seconds()
        logger.info(
            f"Snapshot updated in {duration:.1f}s: {len(self.snapshot.segments)} segments, "
            f"{len(self.snapshot.cameras)} cameras"
        )
        return True

    async def sync_reports(self) -> bool:
        if self.report_sync is None:
            logger.debug("Report sync not configured")
            return False
        return await self.report_sync.sync()

    def statuses(self, now: datetime) -> Tuple[Dict[Any, LaneStatus], Dict[str, int]]:
        """Status of every segment in the current snapshot at `now`"""
        if self.snapshot is None:
            return {}, {"unknown": 0, "blocked": 0, "open": 0}
        return self.evaluator.evaluate_all(self.snapshot.segments, now)

    def build_output(self, now: datetime) -> Dict[str, Any]:
        statuses, counts = self.statuses(now)
        snapshot = self.snapshot

        lanes = []
        cameras = []
        if snapshot is not None:
            for segment in snapshot.segments:
                lane = segment.to_dict()
                lane["status"] = statuses[segment.segment_id].to_dict()
                lanes.append(lane)
            for camera in snapshot.cameras:
                entry = camera.to_dict()
                assignment = snapshot.camera_index.get(camera.camera_id)
                entry["assignment"] = assignment.to_dict() if assignment else None
                cameras.append(entry)

        return {
            "version": SCHEDULE_VERSION,
            "generated": now.isoformat(),
            "fetchedAt": snapshot.fetched_at.isoformat() if snapshot else None,
            "counts": counts,
            "lanes": lanes,
            "cameras": cameras,
            "overrides": len(self.overrides),
            "sync": self.report_sync.status() if self.report_sync else None,
        }

    def write_output(self, now: Optional[datetime] = None) -> Path:
        """Write the rendering snapshot and point bus_lanes_latest at it"""
        now = now or datetime.now(timezone.utc)
        data = self.build_output(now)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        output_path = self.output_dir / f"bus_lanes_{now.strftime('%Y%m%d')}.json"
        latest_path = self.output_dir / "bus_lanes_latest.json"

        if self.compress:
            output_path = output_path.with_suffix(".json.gz")
            latest_path = latest_path.with_suffix(".json.gz")
            with gzip.open(output_path, "wt", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
        else:
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)

        logger.info(f"Wrote status output to {output_path} ({data['counts']})")

        if latest_path.is_symlink() or latest_path.exists():
            latest_path.unlink()
        try:
            latest_path.symlink_to(output_path.name)
        except OSError:
            # Symlinks not supported
            shutil.copy(output_path, latest_path)

        return output_path


async def run_pipeline(pipeline: Optional[BusLanePipeline] = None) -> bool:
    """Entry point: one refresh, one report sync, one status output"""
    pipeline = pipeline or BusLanePipeline()
    ok = await pipeline.refresh()
    await pipeline.sync_reports()
    if ok:
        pipeline.write_output()
    return ok


if __name__ == "__main__":
    import sys

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    success = asyncio.run(run_pipeline())
    sys.exit(0 if success else 1)
