"""
Local cache of community reports.

Reports live in a JSON file (reports + deletion tombstones). Every mutation
is written to disk and then announced to subscribers with the full report
list, so derived indexes can rebuild from scratch.
"""
import json
import logging
import time
import uuid
from dataclasses import fields, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .models import STATUS_DECODED, STATUS_PENDING, CommunityReport, DecodedHours

logger = logging.getLogger(__name__)

Subscriber = Callable[[List[CommunityReport]], None]

_FIELD_NAMES = {f.name for f in fields(CommunityReport)}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_report_id() -> str:
    return f"{int(time.time() * 1000):x}_{uuid.uuid4().hex[:4]}"


class ReportStore:
    def __init__(self, path: Path, clock: Callable[[], str] = utc_now_iso):
        self.path = Path(path)
        self.clock = clock
        self._subscribers: List[Subscriber] = []
        self._reports: List[CommunityReport] = []
        self._tombstones: Dict[str, str] = {}
        self._load()

    # --- reads -----------------------------------------------------------

    def all(self) -> List[CommunityReport]:
        return list(self._reports)

    def get(self, report_id: str) -> Optional[CommunityReport]:
        for report in self._reports:
            if report.id == report_id:
                return report
        return None

    @property
    def tombstones(self) -> Dict[str, str]:
        """Deleted report id -> deletion time"""
        return dict(self._tombstones)

    def reports_for_street(self, street_name: Optional[str]) -> List[CommunityReport]:
        """Reports whose street equals, contains or is contained in the name"""
        if not street_name:
            return []
        name = street_name.strip()
        return [
            r for r in self._reports
            if r.street and (r.street.strip() == name or name in r.street or r.street in name)
        ]

    # --- mutations -------------------------------------------------------

    def add(self, report: CommunityReport) -> CommunityReport:
        now = self.clock()
        report = replace(
            report,
            id=new_report_id(),
            timestamp=now,
            updated_at=now,
            status=report.status or STATUS_PENDING,
        )
        self._reports.append(report)
        logger.info(f"Added {report.type} report {report.id} for {report.street!r}")
        self._commit()
        return report

    def update(self, report_id: str, **changes) -> Optional[CommunityReport]:
        unknown = set(changes) - _FIELD_NAMES
        if unknown:
            raise ValueError(f"Unknown report fields: {', '.join(sorted(unknown))}")

        for i, report in enumerate(self._reports):
            if report.id == report_id:
                updated = replace(report, **changes)
                updated.updated_at = self.clock()
                self._reports[i] = updated
                self._commit()
                return updated

        logger.warning(f"Report {report_id} not found for update")
        return None

    def decode(
        self, report_id: str, hours: DecodedHours, segment_ids: Optional[List] = None
    ) -> Optional[CommunityReport]:
        """Attach hours read from the sign photo and mark the report decoded"""
        return self.update(
            report_id,
            status=STATUS_DECODED,
            decoded_hours=hours,
            segment_ids=list(segment_ids) if segment_ids else None,
        )

    def delete(self, report_id: str) -> bool:
        remaining = [r for r in self._reports if r.id != report_id]
        if len(remaining) == len(self._reports):
            return False
        self._reports = remaining
        self._tombstones[report_id] = self.clock()
        self._commit()
        return True

    def replace_all(
        self, reports: List[CommunityReport], tombstones: Optional[Dict[str, str]] = None
    ):
        """Swap in a merged report set (used by sync)"""
        self._reports = list(reports)
        if tombstones is not None:
            self._tombstones = dict(tombstones)
        self._commit()

    def subscribe(self, callback: Subscriber):
        self._subscribers.append(callback)

    # --- persistence -----------------------------------------------------

    def _commit(self):
        self._save()
        snapshot = self.all()
        for callback in self._subscribers:
            callback(snapshot)

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, list):
                data = {"reports": data}
            self._reports = [CommunityReport.from_dict(r) for r in data.get("reports", [])]
            self._tombstones = dict(data.get("tombstones") or {})
            logger.info(f"Loaded {len(self._reports)} community reports from {self.path}")
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load community reports: {e}")
            self._reports = []
            self._tombstones = {}

    def _save(self):
        payload = {
            "reports": [r.to_dict() for r in self._reports],
            "tombstones": self._tombstones,
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.path)
        except OSError as e:
            logger.warning(f"Failed to save community reports: {e}")
