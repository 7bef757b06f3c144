"""Application state: config, report cache, and the external collaborators built from it."""

import logging
from pathlib import Path
from typing import Optional

from algorithm.models.config import RankingConfig

from .config import ServerConfig, get_config
from .services import (
    AnalysisGenerator,
    FirestoreKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    LiteLLMAnalysisGenerator,
    MemoryKeyValueStore,
    ReportCacheStore,
    YouTubeVideoSource,
)

logger = logging.getLogger(__name__)


class AppState:
    """Global application state."""

    def __init__(
        self,
        config: ServerConfig,
        storage: Optional[KeyValueStore] = None,
        video_source: Optional[YouTubeVideoSource] = None,
        analysis_generator: Optional[AnalysisGenerator] = None,
    ):
        self.config = config
        self.ranking_config: RankingConfig = config.ranking_config()

        storage = storage if storage is not None else self._create_storage(config)
        self.report_cache = ReportCacheStore(
            storage,
            max_reports_per_channel=config.report_cache_max_per_channel,
            ttl=config.report_cache_ttl,
            prefix=config.report_cache_prefix,
        )
        logger.info(
            "[startup] Report cache: %s (max %d per channel, ttl %sh)",
            type(storage).__name__, config.report_cache_max_per_channel, config.report_cache_ttl_hours,
        )

        # Collaborators that need API keys stay None without them
        self.video_source = video_source if video_source is not None else self._create_video_source(config)
        self.analysis_generator = (
            analysis_generator if analysis_generator is not None else self._create_analysis_generator(config)
        )

    def _create_storage(self, config: ServerConfig) -> KeyValueStore:
        """Create the key-value substrate from config (memory, JSON file, or Firestore)."""
        backend = config.report_cache_backend
        if backend == "firebase":
            cred_path = Path(config.firebase_credentials_path) if config.firebase_credentials_path else None
            if not cred_path or not cred_path.is_file():
                raise ValueError(
                    f"REPORT_CACHE_BACKEND=firebase needs FIREBASE_CREDENTIALS_PATH pointing to a file, got {cred_path}"
                )
            return FirestoreKeyValueStore(
                project_id=config.firebase_project_id,
                credentials_path=cred_path,
            )
        if backend == "memory":
            return MemoryKeyValueStore(quota_bytes=config.report_cache_quota_bytes)
        return JsonFileKeyValueStore(config.report_cache_path, quota_bytes=config.report_cache_quota_bytes)

    def _create_video_source(self, config: ServerConfig) -> Optional[YouTubeVideoSource]:
        if not config.youtube_api_key:
            logger.warning("[startup] YOUTUBE_API_KEY not set; /api/analyze can only reuse cached reports")
            return None
        return YouTubeVideoSource(config.youtube_api_key)

    def _create_analysis_generator(self, config: ServerConfig) -> Optional[AnalysisGenerator]:
        if not config.gemini_api_key:
            logger.warning("[startup] GEMINI_API_KEY not set; report generation disabled")
            return None
        return LiteLLMAnalysisGenerator(model=config.analysis_model, api_key=config.gemini_api_key)


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        _state = AppState(get_config())
    return _state


def set_state(state: Optional[AppState]) -> None:
    """Replace the global state (None resets it to be rebuilt from config)."""
    global _state
    _state = state
