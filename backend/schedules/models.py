"""Schedule records shared by the static table and decoded sign reports"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

Range = Tuple[float, float]
Ranges = Tuple[Range, ...]

DAY_FIELDS = ("sun_thu", "fri", "sat")


class WeeklyHoursMixin:
    """Day-class interval lookup for anything with sun_thu/fri/sat/all_week"""

    def ranges_for(self, day_type: str) -> Optional[Ranges]:
        if day_type not in DAY_FIELDS:
            raise ValueError(f"Unknown day type: {day_type}")
        return getattr(self, day_type)

    def hours_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"allWeek": self.all_week}
        for day in DAY_FIELDS:
            ranges = getattr(self, day)
            result[day] = [list(r) for r in ranges] if ranges else None
        return result


def to_ranges(raw: Optional[Iterable[Iterable[Any]]]) -> Optional[Ranges]:
    """[[7, 22], [15, 19]] -> ((7.0, 22.0), (15.0, 19.0)); empty/None -> None"""
    if not raw:
        return None
    ranges = tuple((float(start), float(end)) for start, end in raw)
    return ranges or None


@dataclass(eq=False)
class ScheduleEntry(WeeklyHoursMixin):
    """
    One row of the municipal bus lane table. A street can have several rows,
    one per section; section "default" marks a street-wide fallback.
    Compared by identity: duplicate rows stay distinct candidates.
    """
    street: str
    section: str
    sun_thu: Optional[Ranges] = None
    fri: Optional[Ranges] = None
    sat: Optional[Ranges] = None
    all_week: bool = False

    @property
    def is_default(self) -> bool:
        return self.section == "default"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ScheduleEntry":
        return cls(
            street=raw["street"],
            section=raw.get("section") or "",
            sun_thu=to_ranges(raw.get("sun_thu")),
            fri=to_ranges(raw.get("fri")),
            sat=to_ranges(raw.get("sat")),
            all_week=bool(raw.get("allWeek", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {"street": self.street, "section": self.section}
        result.update(self.hours_dict())
        return result
