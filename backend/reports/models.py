"""Community sign reports and the hours decoded from them"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from schedules.models import Ranges, WeeklyHoursMixin, to_ranges

REPORT_TYPE_SIGN = "sign"
REPORT_TYPE_CAMERA = "camera_direction"

STATUS_PENDING = "pending"
STATUS_DECODED = "decoded"
STATUS_REJECTED = "rejected"
REPORT_STATUSES = (STATUS_PENDING, STATUS_DECODED, STATUS_REJECTED)


_NO_TIME = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value: Optional[str]) -> datetime:
    """ISO 8601 with Z or an offset -> aware datetime; missing or malformed sorts first"""
    if not value:
        return _NO_TIME
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _NO_TIME
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

@dataclass
class DecodedHours(WeeklyHoursMixin):
    """Hours read off a sign photo; same shape as a schedule row's hours"""
    all_week: bool = False
    sun_thu: Optional[Ranges] = None
    fri: Optional[Ranges] = None
    sat: Optional[Ranges] = None

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> Optional["DecodedHours"]:
        if not raw:
            return None
        return cls(
            all_week=bool(raw.get("allWeek", False)),
            sun_thu=to_ranges(raw.get("sun_thu")),
            fri=to_ranges(raw.get("fri")),
            sat=to_ranges(raw.get("sat")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.hours_dict()


@dataclass
class CommunityReport:
    id: Optional[str] = None
    type: str = REPORT_TYPE_SIGN
    street: str = ""
    section: str = ""
    notes: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    gps_source: Optional[str] = None  # exif | device | camera_location | none
    segment_ids: Optional[List[Any]] = None
    camera_id: Optional[Any] = None
    camera_name: str = ""
    camera_site: Optional[str] = None
    timestamp: Optional[str] = None   # ISO 8601, set on submission
    updated_at: Optional[str] = None
    status: str = STATUS_PENDING
    decoded_hours: Optional[DecodedHours] = None
    photo_data: Optional[str] = None  # opaque data URL, never interpreted
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_decoded(self) -> bool:
        return (
            self.type == REPORT_TYPE_SIGN
            and self.status == STATUS_DECODED
            and self.decoded_hours is not None
        )

    @property
    def version_time(self) -> str:
        """Timestamp used for last-writer-wins merging"""
        return self.updated_at or self.timestamp or ""

    @property
    def version_key(self) -> datetime:
        return parse_timestamp(self.version_time)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CommunityReport":
        known = {
            "id", "type", "street", "section", "notes", "lat", "lng", "gpsSource",
            "featureIds", "cameraObjectId", "cameraName", "cameraMsAtar",
            "timestamp", "updatedAt", "status", "decodedHours", "photoData",
        }
        segment_ids = raw.get("featureIds")
        return cls(
            id=raw.get("id"),
            type=raw.get("type") or REPORT_TYPE_SIGN,
            street=raw.get("street") or "",
            section=raw.get("section") or "",
            notes=raw.get("notes") or "",
            lat=raw.get("lat"),
            lng=raw.get("lng"),
            gps_source=raw.get("gpsSource"),
            segment_ids=list(segment_ids) if segment_ids else None,
            camera_id=raw.get("cameraObjectId"),
            camera_name=raw.get("cameraName") or "",
            camera_site=raw.get("cameraMsAtar"),
            timestamp=raw.get("timestamp"),
            updated_at=raw.get("updatedAt"),
            status=raw.get("status") or STATUS_PENDING,
            decoded_hours=DecodedHours.from_dict(raw.get("decodedHours")),
            photo_data=raw.get("photoData"),
            extra={k: v for k, v in raw.items() if k not in known},
        )

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.extra)
        result.update({
            "id": self.id,
            "type": self.type,
            "street": self.street,
            "section": self.section,
            "notes": self.notes,
            "lat": self.lat,
            "lng": self.lng,
            "gpsSource": self.gps_source,
            "featureIds": list(self.segment_ids) if self.segment_ids else None,
            "timestamp": self.timestamp,
            "updatedAt": self.updated_at,
            "status": self.status,
            "decodedHours": self.decoded_hours.to_dict() if self.decoded_hours else None,
            "photoData": self.photo_data,
        })
        if self.type == REPORT_TYPE_CAMERA:
            result["cameraObjectId"] = self.camera_id
            result["cameraName"] = self.camera_name
            result["cameraMsAtar"] = self.camera_site
        return result
