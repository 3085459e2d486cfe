"""Community sign reports: local store, override index and remote sync"""
from .models import (
    REPORT_TYPE_CAMERA,
    REPORT_TYPE_SIGN,
    STATUS_DECODED,
    STATUS_PENDING,
    STATUS_REJECTED,
    CommunityReport,
    DecodedHours,
    parse_timestamp,
)
from .overrides import Override, OverrideIndex
from .store import ReportStore
from .sync import GitHubReportRemote, RemoteSnapshot, ReportSync, SyncState, merge_reports

__all__ = [
    "REPORT_TYPE_CAMERA",
    "REPORT_TYPE_SIGN",
    "STATUS_DECODED",
    "STATUS_PENDING",
    "STATUS_REJECTED",
    "CommunityReport",
    "DecodedHours",
    "GitHubReportRemote",
    "Override",
    "OverrideIndex",
    "RemoteSnapshot",
    "ReportStore",
    "ReportSync",
    "SyncState",
    "merge_reports",
    "parse_timestamp",
]
