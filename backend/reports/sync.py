"""
Replication of the local report cache with a shared remote copy.

The remote of record is a JSON document stored through a Git hosting
"contents" API: every read returns the document with a version (blob sha)
and every write must name the version it replaces. A write against a moved
version is rejected, in which case the document is re-read, merged again
and the write retried a bounded number of times.

Merge is last-writer-wins per report id (updatedAt, falling back to the
submission timestamp); deletions travel as tombstones.
"""
import asyncio
import base64
import json
import logging
import time
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional

import aiohttp

from config import (
    REPORTS_API_URL,
    REPORTS_BRANCH,
    REPORTS_PATH,
    REPORTS_REPO,
    REPORTS_TOKEN,
    SYNC_MAX_RETRIES,
)
from errors import VersionConflictError
from fetchers.base_fetcher import BaseFetcher
from .models import CommunityReport, parse_timestamp
from .store import ReportStore

logger = logging.getLogger(__name__)

CONFLICT_STATUSES = (409, 412, 422)


class SyncState(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    CONFLICT_RETRY = "conflict_retry"
    OFFLINE = "offline"


class RemoteSnapshot(NamedTuple):
    reports: List[CommunityReport]
    version: Optional[str]  # None when the document does not exist yet
    tombstones: Dict[str, str]


def _decode_document(raw) -> RemoteSnapshot:
    if isinstance(raw, list):
        raw = {"reports": raw}
    reports = [CommunityReport.from_dict(r) for r in raw.get("reports", [])]
    return RemoteSnapshot(reports, None, dict(raw.get("tombstones") or {}))


class GitHubReportRemote(BaseFetcher):
    """Reads and writes the shared report document via the contents API"""

    def __init__(
        self,
        repo: str = REPORTS_REPO,
        path: str = REPORTS_PATH,
        branch: str = REPORTS_BRANCH,
        token: str = REPORTS_TOKEN,
        api_url: str = REPORTS_API_URL,
        session=None,
    ):
        super().__init__(session)
        self.repo = repo
        self.path = path
        self.branch = branch
        self.token = token
        self.url = f"{api_url.rstrip('/')}/repos/{repo}/contents/{path}"

    def get_source_name(self) -> str:
        return f"Shared reports ({self.repo}:{self.path})"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def fetch(self) -> RemoteSnapshot:
        async with self.session.get(
            self.url, params={"ref": self.branch}, headers=self._headers()
        ) as response:
            if response.status == 404:
                logger.info(f"{self.get_source_name()} does not exist yet")
                return RemoteSnapshot([], None, {})
            response.raise_for_status()
            data = await response.json(content_type=None)

        content = base64.b64decode(data.get("content") or "").decode("utf-8")
        snapshot = _decode_document(json.loads(content) if content.strip() else {})
        return snapshot._replace(version=data.get("sha"))

    async def push(
        self,
        reports: List[CommunityReport],
        version: Optional[str],
        tombstones: Optional[Dict[str, str]] = None,
        message: str = "Update community reports",
    ) -> Optional[str]:
        """Write the document over `version`; returns the new version"""
        document = {
            "reports": [r.to_dict() for r in reports],
            "tombstones": tombstones or {},
        }
        body = {
            "message": message,
            "content": base64.b64encode(
                json.dumps(document, ensure_ascii=False, indent=2).encode("utf-8")
            ).decode("ascii"),
            "branch": self.branch,
        }
        if version:
            body["sha"] = version

        async with self.session.put(self.url, json=body, headers=self._headers()) as response:
            if response.status in CONFLICT_STATUSES:
                raise VersionConflictError(version, response.status)
            response.raise_for_status()
            data = await response.json(content_type=None)

        return (data.get("content") or {}).get("sha")


def merge_tombstones(*sources: Dict[str, str]) -> Dict[str, str]:
    merged: Dict[str, str] = {}
    for source in sources:
        for report_id, deleted_at in (source or {}).items():
            if report_id not in merged:
                merged[report_id] = deleted_at
            elif parse_timestamp(deleted_at) > parse_timestamp(merged[report_id]):
                merged[report_id] = deleted_at
    return merged


def merge_reports(
    local: List[CommunityReport],
    remote: List[CommunityReport],
    tombstones: Optional[Dict[str, str]] = None,
) -> List[CommunityReport]:
    """Union by id; the newer copy of each report wins, tombstoned ids are dropped"""
    tombstones = tombstones or {}
    merged: Dict[str, CommunityReport] = {}

    for report in list(local) + list(remote):
        if report.id is None or report.id in tombstones:
            continue
        current = merged.get(report.id)
        if current is None or report.version_key > current.version_key:
            merged[report.id] = report

    return list(merged.values())


def _as_dicts(reports: List[CommunityReport]) -> Dict[str, dict]:
    return {r.id: r.to_dict() for r in reports}


class ReportSync:
    """
    State machine:
        idle -> syncing -> idle
        syncing -> conflict_retry -> syncing (bounded)
        syncing -> offline (network failure; next sync starts over)
    """

    def __init__(
        self,
        store: ReportStore,
        remote: GitHubReportRemote,
        max_retries: int = SYNC_MAX_RETRIES,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.remote = remote
        self.max_retries = max_retries
        self.clock = clock
        self.state = SyncState.IDLE
        self.version: Optional[str] = None
        self.last_success: Optional[float] = None
        self.last_error: Optional[str] = None
        self.conflicts = 0

    def _set_state(self, state: SyncState):
        if state != self.state:
            logger.info(f"Report sync: {self.state.value} -> {state.value}")
            self.state = state

    def status(self) -> Dict:
        return {
            "state": self.state.value,
            "version": self.version,
            "last_success": self.last_success,
            "last_error": self.last_error,
            "conflicts": self.conflicts,
        }

    async def sync(self) -> bool:
        """One replication round; never raises, returns True on success"""
        self._set_state(SyncState.SYNCING)
        attempts = 0

        try:
            async with self.remote:
                while True:
                    try:
                        await self._sync_once()
                        break
                    except VersionConflictError as e:
                        attempts += 1
                        self.conflicts += 1
                        self.last_error = str(e)
                        if attempts > self.max_retries:
                            logger.error(f"Report sync gave up after {attempts} conflicts")
                            self._set_state(SyncState.IDLE)
                            return False
                        self._set_state(SyncState.CONFLICT_RETRY)
                        logger.warning(f"{e}; re-fetching (retry {attempts}/{self.max_retries})")
                        self._set_state(SyncState.SYNCING)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Report sync failed, working offline: {e}")
            self.last_error = str(e)
            self._set_state(SyncState.OFFLINE)
            return False
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Shared report document is malformed: {e}")
            self.last_error = str(e)
            self._set_state(SyncState.IDLE)
            return False

        self.last_success = self.clock()
        self.last_error = None
        self._set_state(SyncState.IDLE)
        return True

    async def _sync_once(self):
        snapshot = await self.remote.fetch()

        local = self.store.all()
        tombstones = merge_tombstones(self.store.tombstones, snapshot.tombstones)
        merged = merge_reports(local, snapshot.reports, tombstones)
        merged_dicts = _as_dicts(merged)

        if merged_dicts != _as_dicts(local) or tombstones != self.store.tombstones:
            self.store.replace_all(merged, tombstones)
            logger.info(f"Report sync: local cache now holds {len(merged)} reports")

        if merged_dicts != _as_dicts(snapshot.reports) or tombstones != snapshot.tombstones:
            self.version = await self.remote.push(
                merged, snapshot.version, tombstones,
                message=f"Sync {len(merged)} community reports",
            )
            logger.info(f"Report sync: pushed {len(merged)} reports")
        else:
            self.version = snapshot.version
