"""
Street name normalization and the GIS <-> schedule alias table.

Every component that compares street names goes through normalize_street();
comparing names normalized in different ways is a bug.
"""
import re
from typing import Dict, List, Optional

# Leading type words: street, st., boulevard, blvd., road, promenade
_PREFIX_RE = re.compile(r"^(רחוב|רח|שדרות|שד|דרך|טיילת)\s+")
_QUOTES_RE = re.compile(r"[\"'׳`״]")
_SPACES_RE = re.compile(r"\s+")

# GIS (layer 611 / 949) name -> schedule table name, both normalized
STREET_ALIASES: Dict[str, str] = {
    # GIS "Surname Firstname" -> short name used on signs and in the table
    "בגין מנחם": "בגין",
    "נמיר מרדכי": "נמיר",
    "לבון פנחס": "לבון",
    "סנה משה": "משה סנה",
    "קפלן אליעזר": "קפלן",
    "אלון יגאל": "יגאל אלון",
    "אלחנן יצחק": "יצחק אלחנן",
    # Spelling variants
    "תל גבורים": "תל גיבורים",
    # Same lane under two names
    "העליה": "היינה",
    # Junction areas that take the adjoining street's hours
    "גבעת התחמושת": "קפלן",
}


def normalize_street(name: Optional[str]) -> str:
    """
    Canonical form of a street name: quotes and geresh removed, whitespace
    collapsed and leading type words ("רחוב", "שד׳", "דרך", ...) stripped.
    normalize_street(normalize_street(x)) == normalize_street(x).
    """
    if not name:
        return ""

    n = _QUOTES_RE.sub("", str(name))
    n = _SPACES_RE.sub(" ", n).strip()
    while True:
        stripped = _PREFIX_RE.sub("", n, count=1)
        if stripped == n:
            break
        n = stripped.strip()
    return n


def resolve_alias(normalized: str) -> str:
    """Schedule-side name for a normalized GIS name (one hop, identity if none)"""
    return STREET_ALIASES.get(normalized, normalized)


def reverse_aliases(normalized: str) -> List[str]:
    """GIS-side names that alias to the given normalized name"""
    if not normalized:
        return []
    return [gis_name for gis_name, sched_name in STREET_ALIASES.items() if sched_name == normalized]


def street_variants(name: Optional[str]) -> List[str]:
    """Normalized name followed by its alias, without duplicates"""
    norm = normalize_street(name)
    if not norm:
        return []
    aliased = resolve_alias(norm)
    return [norm] if aliased == norm else [norm, aliased]


def same_street(a: Optional[str], b: Optional[str]) -> bool:
    """Equal after normalization, directly or through the alias table"""
    variants_a = street_variants(a)
    variants_b = street_variants(b)
    return bool(variants_a) and any(v in variants_b for v in variants_a)
