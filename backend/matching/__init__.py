from .schedule_matcher import ScheduleIndex, ScheduleMatcher, match_score
from .street_names import (
    STREET_ALIASES,
    normalize_street,
    resolve_alias,
    reverse_aliases,
    same_street,
    street_variants,
)

__all__ = [
    "STREET_ALIASES",
    "ScheduleIndex",
    "ScheduleMatcher",
    "match_score",
    "normalize_street",
    "resolve_alias",
    "reverse_aliases",
    "same_street",
    "street_variants",
]
