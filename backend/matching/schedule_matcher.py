"""
Match live bus lane segments to rows of the static schedule table.

Street names differ between the GIS layer and the municipal table
("בגין מנחם" vs "בגין", "דרך נמיר" vs "נמיר"), and a street can have many
rows, one per section. Candidates are gathered by normalized name, alias
and substring containment, then ranked by how well the row's section text
agrees with the segment's junctions and direction.
"""
import logging
from typing import Dict, Iterable, List, Optional

from schedules.models import ScheduleEntry
from transformers.feature_transformer import RoadSegment
from .street_names import normalize_street, resolve_alias

logger = logging.getLogger(__name__)

EXACT_MATCH_SCORE = 1.0
PARTIAL_MATCH_SCORE = 0.3
JUNCTION_BONUS = 3.0
DIRECTION_BONUS = 2.0
DEFAULT_SECTION_CAP = 0.5

# "toward X" and "Xward" phrasings used in section descriptions
DIRECTION_CUES = {
    "N": ("לצפון", "צפונה"),
    "S": ("לדרום", "דרומה"),
    "E": ("למזרח", "מזרחה"),
    "W": ("למערב", "מערבה"),
}


class ScheduleIndex:
    """Schedule rows grouped by normalized street name, in table order"""

    def __init__(self, entries: Iterable[ScheduleEntry]):
        self._by_street: Dict[str, List[ScheduleEntry]] = {}
        for entry in entries:
            key = normalize_street(entry.street)
            if not key:
                logger.warning(f"Schedule row without street name: {entry.section!r}")
                continue
            self._by_street.setdefault(key, []).append(entry)

    def keys(self) -> List[str]:
        return list(self._by_street)

    def entries_for(self, key: str) -> List[ScheduleEntry]:
        return list(self._by_street.get(key, []))

    def __len__(self) -> int:
        return sum(len(rows) for rows in self._by_street.values())


def match_score(entry: ScheduleEntry, segment: RoadSegment) -> float:
    """How well a schedule row fits a segment; 0 when the street does not match"""
    segment_street = normalize_street(segment.street_name)
    entry_street = normalize_street(entry.street)
    if not segment_street or not entry_street:
        return 0.0

    aliased = resolve_alias(segment_street)
    exact = entry_street in (segment_street, aliased)
    partial = not exact and (segment_street in entry_street or entry_street in segment_street)
    if not exact and not partial:
        return 0.0

    score = EXACT_MATCH_SCORE if exact else PARTIAL_MATCH_SCORE

    section = entry.section or ""
    from_street = normalize_street(segment.from_street)
    to_street = normalize_street(segment.to_street)
    if from_street and from_street in section:
        score += JUNCTION_BONUS
    if to_street and to_street in section:
        score += JUNCTION_BONUS

    cues = DIRECTION_CUES.get(segment.direction or "")
    if cues and any(cue in section for cue in cues):
        score += DIRECTION_BONUS

    if entry.is_default:
        score = min(score, DEFAULT_SECTION_CAP)

    return score


class ScheduleMatcher:
    """Finds the best schedule row for a segment, or None when nothing matches"""

    def __init__(self, index: ScheduleIndex):
        self.index = index

    def candidates(self, segment: RoadSegment) -> List[ScheduleEntry]:
        raw = normalize_street(segment.street_name)
        if not raw:
            return []

        aliased = resolve_alias(raw)
        variants = [raw] if aliased == raw else [raw, aliased]

        found: List[ScheduleEntry] = []
        seen = set()
        for key in self.index.keys():
            if not any(key == v or v in key or key in v for v in variants):
                continue
            for entry in self.index.entries_for(key):
                if id(entry) not in seen:
                    seen.add(id(entry))
                    found.append(entry)
        return found

    def find_schedule(self, segment: RoadSegment) -> Optional[ScheduleEntry]:
        candidates = self.candidates(segment)
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]

        best = None
        best_score = 0.0
        for entry in candidates:
            score = match_score(entry, segment)
            if score > best_score:
                best_score = score
                best = entry

        return best or candidates[0]

    def match_stats(self, segments: Iterable[RoadSegment]) -> Dict:
        """Matched/unmatched counts and the unmatched street names"""
        matched = 0
        unmatched = 0
        unmatched_streets = set()
        for segment in segments:
            if self.find_schedule(segment) is not None:
                matched += 1
            else:
                unmatched += 1
                unmatched_streets.add(segment.street_name or "")

        stats = {
            "matched": matched,
            "unmatched": unmatched,
            "unmatched_streets": sorted(unmatched_streets),
        }
        logger.info(f"Schedule matching: {matched} matched, {unmatched} unmatched")
        if unmatched_streets:
            logger.info(f"Unmatched streets: {', '.join(stats['unmatched_streets'])}")
        return stats
