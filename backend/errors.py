"""Exceptions raised across the bus lane service"""
from typing import Optional


class BusLaneError(Exception):
    """Base class for all service errors"""


class ScheduleTableError(BusLaneError):
    """The static schedule table is missing, empty or malformed"""


class FeatureServiceError(BusLaneError):
    """The feature service answered with an error payload"""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class VersionConflictError(BusLaneError):
    """A remote write was rejected because the stored version changed"""

    def __init__(self, version: Optional[str], status: Optional[int] = None):
        super().__init__(f"Remote version conflict (sent version={version}, status={status})")
        self.version = version
        self.status = status
