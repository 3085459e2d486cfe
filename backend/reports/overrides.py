"""Sign overrides derived from decoded community reports"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from matching.street_names import normalize_street, resolve_alias
from status.lane_status import OverrideProvider
from transformers.feature_transformer import RoadSegment
from .models import CommunityReport, DecodedHours, parse_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Override:
    hours: DecodedHours
    street: str
    timestamp: Optional[str]
    segment_ids: Optional[tuple]
    report: CommunityReport

    @property
    def report_id(self) -> Optional[str]:
        return self.report.id


class OverrideIndex(OverrideProvider):
    """
    Lookup maps by segment id and by street name. Always rebuilt from the
    full report list, never patched: attach() to a ReportStore to rebuild
    on every mutation.
    """

    def __init__(self, reports: Iterable[CommunityReport] = ()):
        self.by_segment: Dict[str, Override] = {}
        self.by_street: Dict[str, Override] = {}
        self.rebuild(reports)

    def __len__(self) -> int:
        return len(self.by_segment) + len(self.by_street)

    def attach(self, store) -> "OverrideIndex":
        self.rebuild(store.all())
        store.subscribe(self.rebuild)
        return self

    def rebuild(self, reports: Iterable[CommunityReport]):
        by_segment: Dict[str, Override] = {}
        by_street: Dict[str, Override] = {}

        decoded: List[CommunityReport] = sorted(
            (r for r in reports if r.is_decoded),
            key=lambda r: parse_timestamp(r.timestamp),
        )

        for report in decoded:
            override = Override(
                hours=report.decoded_hours,
                street=report.street,
                timestamp=report.timestamp,
                segment_ids=tuple(report.segment_ids) if report.segment_ids else None,
                report=report,
            )
            if override.segment_ids:
                for segment_id in override.segment_ids:
                    by_segment[str(segment_id)] = override
                continue

            key = report.street.strip() if report.street else ""
            if key:
                by_street[key] = override

        self.by_segment = by_segment
        self.by_street = by_street
        logger.info(
            f"Sign overrides: {len(by_segment)} segments, {len(by_street)} streets "
            f"from {len(decoded)} decoded reports"
        )

    def find_override(self, segment: RoadSegment) -> Optional[Override]:
        override = self.by_segment.get(str(segment.segment_id))
        if override is not None:
            return override

        street = segment.street_name
        if not street:
            return None
        if street in self.by_street:
            return self.by_street[street]

        norm = normalize_street(street)
        for key, override in self.by_street.items():
            if normalize_street(key) == norm:
                return override

        aliased = resolve_alias(norm)
        for key, override in self.by_street.items():
            if normalize_street(key) == aliased:
                return override

        return None
