"""
Channel Report API server

Usage: uvicorn server:app --reload --port 8000
"""

from .app import app, create_app
from .config import ServerConfig, get_config, reload_config
from .services import MemoryKeyValueStore, ReportCacheStore
from .state import AppState, get_state, set_state

__all__ = [
    "app",
    "create_app",
    "AppState",
    "ServerConfig",
    "get_config",
    "reload_config",
    "get_state",
    "set_state",
    "MemoryKeyValueStore",
    "ReportCacheStore",
]
