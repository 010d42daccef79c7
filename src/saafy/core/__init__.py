"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging and console output (Loguru, Rich)
- Key/value persistence (JSON files, in-memory session store)
- Input sanitization and rate limiting
"""

from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
)
from .events import EventEmitter
from .output import get_console, log, setup_loguru
from .security import (
    RateLimiter,
    is_trusted_audio_source,
    sanitize_id,
    sanitize_search_query,
    validate_pagination,
)
from .storage import JsonFileStore, KeyValueStore, MemoryStore, StorageReadError

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    # Events
    "EventEmitter",
    # Output
    "get_console",
    "log",
    "setup_loguru",
    # Security
    "RateLimiter",
    "is_trusted_audio_source",
    "sanitize_id",
    "sanitize_search_query",
    "validate_pagination",
    # Storage
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "StorageReadError",
]
