"""Typed failures raised by the report cache, the video source, and the analysis generator."""

from typing import Optional


class ReportCacheError(Exception):
    """Base for report cache failures."""


class NotFound(ReportCacheError):
    """Requested (channel_id, timestamp) is absent, expired, or unreadable."""

    def __init__(self, channel_id: str, timestamp: Optional[int] = None):
        self.channel_id = channel_id
        self.timestamp = timestamp
        what = f"{channel_id}@{timestamp}" if timestamp is not None else channel_id
        super().__init__(f"No cached report for {what}")


class StorageError(ReportCacheError):
    """The key-value substrate failed to read or write."""


class StorageQuotaExceeded(StorageError):
    """A write would push the substrate past its quota."""


class CorruptEntry(ReportCacheError):
    """A stored report failed to deserialize. Skipped in listings."""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Corrupt cache entry {key!r}: {reason}")


class VideoSourceError(Exception):
    """YouTube Data API failure, mapped to an error type and an HTTP status."""

    def __init__(self, message: str, error_type: str = "YOUTUBE_API_ERROR", status_code: int = 500):
        self.error_type = error_type
        self.status_code = status_code
        super().__init__(message)


class AnalysisError(Exception):
    """The analysis generator failed or returned something that is not a JSON object."""
