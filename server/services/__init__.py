"""Backing logic: report cache, storage substrates, video source, analysis generator."""

from .analysis_generator import AnalysisGenerator, LiteLLMAnalysisGenerator, parse_json_response
from .errors import (
    AnalysisError,
    CorruptEntry,
    NotFound,
    ReportCacheError,
    StorageError,
    StorageQuotaExceeded,
    VideoSourceError,
)
from .kv_store import (
    DEFAULT_QUOTA_BYTES,
    FirestoreKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)
from .report_cache import ReportCacheStore
from .video_source import YouTubeVideoSource, parse_channel_ref

__all__ = [
    "AnalysisError",
    "AnalysisGenerator",
    "CorruptEntry",
    "DEFAULT_QUOTA_BYTES",
    "FirestoreKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LiteLLMAnalysisGenerator",
    "MemoryKeyValueStore",
    "NotFound",
    "ReportCacheError",
    "ReportCacheStore",
    "StorageError",
    "StorageQuotaExceeded",
    "VideoSourceError",
    "YouTubeVideoSource",
    "parse_channel_ref",
    "parse_json_response",
]
