"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from algorithm.models.config import RankingConfig

from .services.kv_store import DEFAULT_QUOTA_BYTES
from .services.report_cache import DEFAULT_MAX_REPORTS_PER_CHANNEL, DEFAULT_PREFIX

# Single .env at the project root
root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)

CACHE_BACKENDS = ("memory", "json", "firebase")


@dataclass
class ServerConfig:
    """Server configuration."""

    # API Keys
    youtube_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    analysis_model: str = "gemini/gemini-2.5-flash"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Report cache: "memory" | "json" | "firebase"
    report_cache_backend: str = "json"
    report_cache_path: Path = Path(__file__).parent.parent / "data" / "report_cache.json"
    report_cache_quota_bytes: Optional[int] = DEFAULT_QUOTA_BYTES
    # 24h in the first cache generation, 7 days later; neither is canonical
    report_cache_ttl_hours: float = 168.0
    report_cache_max_per_channel: int = DEFAULT_MAX_REPORTS_PER_CHANNEL
    report_cache_prefix: str = DEFAULT_PREFIX

    # Ranking
    ranking_gravity: float = 1.8
    ranking_highlight_top_k: int = 10
    history_page_size: int = 5
    max_videos: int = 50

    # When report_cache_backend=firebase: service account JSON and optional project id
    firebase_credentials_path: Optional[Path] = None
    firebase_project_id: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        base_dir = Path(__file__).parent.parent

        def _path_env(key: str, default: Optional[Path] = None) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return default
            p = Path(v)
            return p if p.is_absolute() else (base_dir / p).resolve()

        quota = os.getenv("REPORT_CACHE_QUOTA_BYTES", str(DEFAULT_QUOTA_BYTES)).strip()
        return cls(
            youtube_api_key=os.getenv("YOUTUBE_API_KEY") or None,
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            analysis_model=os.getenv("ANALYSIS_MODEL", "gemini/gemini-2.5-flash"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            report_cache_backend=os.getenv("REPORT_CACHE_BACKEND", "json").strip().lower(),
            report_cache_path=_path_env("REPORT_CACHE_PATH", base_dir / "data" / "report_cache.json"),
            report_cache_quota_bytes=int(quota) if quota and quota != "0" else None,
            report_cache_ttl_hours=float(os.getenv("REPORT_CACHE_TTL_HOURS", "168")),
            report_cache_max_per_channel=int(os.getenv("REPORT_CACHE_MAX_PER_CHANNEL", str(DEFAULT_MAX_REPORTS_PER_CHANNEL))),
            report_cache_prefix=os.getenv("REPORT_CACHE_PREFIX", DEFAULT_PREFIX),
            ranking_gravity=float(os.getenv("RANKING_GRAVITY", "1.8")),
            ranking_highlight_top_k=int(os.getenv("RANKING_HIGHLIGHT_TOP_K", "10")),
            history_page_size=int(os.getenv("HISTORY_PAGE_SIZE", "5")),
            max_videos=int(os.getenv("MAX_VIDEOS", "50")),
            firebase_credentials_path=_path_env("FIREBASE_CREDENTIALS_PATH") or _path_env("GOOGLE_APPLICATION_CREDENTIALS"),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
        )

    @property
    def report_cache_ttl(self) -> timedelta:
        return timedelta(hours=self.report_cache_ttl_hours)

    def ranking_config(self) -> RankingConfig:
        """RankingConfig with the env overrides applied."""
        return RankingConfig.from_dict({
            "gravity": self.ranking_gravity,
            "highlight_top_k": self.ranking_highlight_top_k,
            "page_size": self.history_page_size,
        })

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.report_cache_backend not in CACHE_BACKENDS:
            errors.append(f"REPORT_CACHE_BACKEND must be one of {CACHE_BACKENDS}, got {self.report_cache_backend!r}")
        if self.report_cache_backend == "firebase" and not self.firebase_credentials_path:
            errors.append("REPORT_CACHE_BACKEND=firebase requires FIREBASE_CREDENTIALS_PATH")
        if self.report_cache_ttl_hours <= 0:
            errors.append("REPORT_CACHE_TTL_HOURS must be positive")
        if self.report_cache_max_per_channel < 1:
            errors.append("REPORT_CACHE_MAX_PER_CHANNEL must be >= 1")
        if self.ranking_gravity <= 0:
            errors.append("RANKING_GRAVITY must be positive")

        # API keys are optional: routes that need them answer 503

        return len(errors) == 0, errors


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
