"""Scheduler: periodic feed refresh, report sync and status output"""
import asyncio
import logging
import signal
import sys
import time
from datetime import datetime, timezone

import schedule

from config import FEED_REFRESH_MINUTES, REPORT_SYNC_MINUTES, STATUS_REFRESH_SECONDS
from pipeline import BusLanePipeline, run_pipeline

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Flag to control graceful shutdown
shutdown_requested = False


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully"""
    global shutdown_requested
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    shutdown_requested = True


def refresh_feeds(pipeline: BusLanePipeline):
    logger.info(f"Scheduled feed refresh starting at {datetime.now(timezone.utc)}")
    if not asyncio.run(pipeline.refresh()):
        logger.error("Scheduled feed refresh failed; previous snapshot kept")


def sync_reports(pipeline: BusLanePipeline):
    asyncio.run(pipeline.sync_reports())


def write_status(pipeline: BusLanePipeline):
    if pipeline.snapshot is None:
        logger.warning("No snapshot yet; skipping status output")
        return
    try:
        pipeline.write_output()
    except OSError as e:
        logger.error(f"Could not write status output: {e}")


def setup_schedule(pipeline: BusLanePipeline):
    """Configure the periodic jobs"""
    schedule.every(STATUS_REFRESH_SECONDS).seconds.do(write_status, pipeline)
    schedule.every(FEED_REFRESH_MINUTES).minutes.do(refresh_feeds, pipeline)
    logger.info(
        f"Status output every {STATUS_REFRESH_SECONDS}s, "
        f"feed refresh every {FEED_REFRESH_MINUTES} min"
    )
    if pipeline.report_sync is not None:
        schedule.every(REPORT_SYNC_MINUTES).minutes.do(sync_reports, pipeline)
        logger.info(f"Report sync every {REPORT_SYNC_MINUTES} min")


def run_scheduler():
    """Run the scheduler loop"""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    pipeline = BusLanePipeline()

    # Initial load before the first tick
    refresh_feeds(pipeline)
    if pipeline.report_sync is not None:
        sync_reports(pipeline)
    write_status(pipeline)

    setup_schedule(pipeline)
    logger.info("Scheduler started. Press Ctrl+C to stop.")
    logger.info(f"Next run: {schedule.next_run()}")

    while not shutdown_requested:
        schedule.run_pending()
        time.sleep(1)

    schedule.clear()
    logger.info("Scheduler stopped.")


def run_once() -> bool:
    """Run a single refresh + output immediately"""
    logger.info("Running pipeline once...")
    return asyncio.run(run_pipeline())


if __name__ == "__main__":
    if "--once" in sys.argv:
        sys.exit(0 if run_once() else 1)
    run_scheduler()
