"""
Configuration management for Saafy
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

from loguru import logger


DEFAULT_API_URL = "https://saafy-api.vercel.app"


@dataclass
class ApiConfig:
    """Configuration for the remote song API."""

    base_url: str = DEFAULT_API_URL
    timeout_seconds: float = 15.0
    cache_ttl_seconds: int = 300
    detail_cache_ttl_seconds: int = 600  # Song/album/artist lookups change rarely
    cache_max_size: int = 200
    rate_limit_burst: int = 15
    rate_limit_per_second: float = 2.0

    def validate(self) -> None:
        """Validate API configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.cache_max_size < 1:
            raise ValueError("cache_max_size must be at least 1")
        if self.rate_limit_burst < 1 or self.rate_limit_per_second <= 0:
            raise ValueError("rate limit must allow at least one request")


@dataclass
class PlayerConfig:
    """Configuration for the playback engine."""

    audio_backend: str = "mpv"  # 'mpv' or 'none' (remote clients render audio)
    mpv_socket_path: Optional[str] = None
    volume: float = 0.7
    load_timeout_seconds: float = 8.0
    restart_threshold_seconds: float = 3.0
    poll_interval_seconds: float = 0.5
    max_skip_attempts: int = 10

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.audio_backend not in {"mpv", "none"}:
            raise ValueError(
                f"Invalid audio_backend: {self.audio_backend!r}. Valid: 'mpv', 'none'"
            )
        if not 0.0 <= self.volume <= 1.0:
            raise ValueError("volume must be between 0.0 and 1.0")
        if self.load_timeout_seconds <= 0:
            raise ValueError("load_timeout_seconds must be positive")


@dataclass
class DiscoveryConfig:
    """Configuration for session-seeded discovery."""

    for_you_limit: int = 12
    songs_per_bucket: int = 8
    languages_per_mix: int = 3
    max_term_attempts: int = 5


@dataclass
class HistoryConfig:
    """Configuration for listening history."""

    max_entries: int = 10


@dataclass
class NotificationsConfig:
    """Configuration for toasts and desktop notifications."""

    toast_duration_seconds: float = 3.0
    desktop: bool = False  # Mirror toasts through notify-send


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # Default: ~/.local/share/saafy/saafy.log
    rotation: str = "10 MB"
    retention: int = 5
    console_output: bool = False


@dataclass
class WebConfig:
    """Configuration for the web API."""

    host: str = "127.0.0.1"
    port: int = 8642
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )


@dataclass
class HarvestConfig:
    """Configuration for the offline CSV harvesting tools."""

    fetch_api_url: str = "https://jiosaavn-api-privatecvc2.vercel.app"
    fetch_delay_seconds: float = 0.5
    fetch_results_per_query: int = 25
    english_target: int = 500
    marathi_target: int = 500
    scrape_base_url: str = "https://www.myswar.co"
    scrape_delay_seconds: float = 2.0
    scrape_max_retries: int = 3
    scrape_start_year: int = 2000
    scrape_end_year: int = 2026


@dataclass
class Config:
    """Main configuration object."""

    api: ApiConfig = field(default_factory=ApiConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    web: WebConfig = field(default_factory=WebConfig)
    harvest: HarvestConfig = field(default_factory=HarvestConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "saafy"
    return Path.home() / ".config" / "saafy"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "saafy"
    return Path.home() / ".local" / "share" / "saafy"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in the project root, marked by pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/saafy (or ~/.config/saafy)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Saafy Configuration

[api]
# Base URL of the saafy song API (override with SAAFY_API_URL)
base_url = "https://saafy-api.vercel.app"

# Request timeout in seconds
timeout_seconds = 15.0

# Response cache
cache_ttl_seconds = 300
detail_cache_ttl_seconds = 600
cache_max_size = 200

# Client-side rate limit (token bucket)
rate_limit_burst = 15
rate_limit_per_second = 2.0

[player]
# Audio backend: "mpv" plays locally, "none" leaves audio to a remote client
audio_backend = "mpv"

# Path for mpv socket (auto-generated if not specified)
# mpv_socket_path = "/tmp/saafy-mpv.sock"

# Starting volume (0.0-1.0), resets every session
volume = 0.7

# Seconds to wait for a track to load before treating it as unplayable
load_timeout_seconds = 8.0

# "Previous" restarts the current track after this many seconds
restart_threshold_seconds = 3.0

[discovery]
for_you_limit = 12
songs_per_bucket = 8
languages_per_mix = 3

# Search terms tried per bucket before it resolves empty
max_term_attempts = 5

[history]
max_entries = 10

[notifications]
toast_duration_seconds = 3.0

# Mirror toasts as desktop notifications (notify-send)
desktop = false

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL), override with SAAFY_LOG_LEVEL
level = "INFO"

# log_file = "/path/to/saafy.log"
rotation = "10 MB"
retention = 5
console_output = false

[web]
host = "127.0.0.1"
port = 8642
cors_origins = ["http://localhost:5173", "http://localhost:3000"]

[harvest]
fetch_api_url = "https://jiosaavn-api-privatecvc2.vercel.app"
fetch_delay_seconds = 0.5
fetch_results_per_query = 25
english_target = 500
marathi_target = 500
scrape_base_url = "https://www.myswar.co"
scrape_delay_seconds = 2.0
scrape_max_retries = 3
scrape_start_year = 2000
scrape_end_year = 2026
""".strip()


def _merge_section(default: Any, data: dict[str, Any], section: str) -> Any:
    """Overlay known keys from a TOML table onto a section dataclass."""
    known = {f.name for f in fields(default)}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown keys in [{section}]: {sorted(unknown)}")
    merged = replace(default, **{k: v for k, v in data.items() if k in known})

    validate = getattr(merged, "validate", None)
    if validate is not None:
        try:
            validate()
        except ValueError as e:
            logger.warning(f"Invalid [{section}] configuration: {e}. Using defaults.")
            return default
    return merged


def _apply_env_overrides(config: Config) -> None:
    """Environment variables win over config.toml values."""
    api_url = os.environ.get("SAAFY_API_URL")
    if api_url:
        config.api.base_url = api_url.rstrip("/")

    log_level = os.environ.get("SAAFY_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()


def load_config(path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - SAAFY_API_URL
    - SAAFY_LOG_LEVEL
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = path or get_config_path()
    config = Config()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        logger.info(f"Created default configuration at: {config_path}")
        _apply_env_overrides(config)
        return config

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Error loading config from {config_path}: {e}. Using defaults.")
        _apply_env_overrides(config)
        return config

    for section in fields(config):
        data = toml_data.get(section.name)
        if isinstance(data, dict):
            setattr(
                config,
                section.name,
                _merge_section(getattr(config, section.name), data, section.name),
            )

    if config.logging.log_file:
        config.logging.log_file = str(Path(config.logging.log_file).expanduser())
    config.logging.level = config.logging.level.upper()
    config.api.base_url = config.api.base_url.rstrip("/")

    _apply_env_overrides(config)
    return config
