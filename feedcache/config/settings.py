"""Application settings with environment variable support."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


# Compute base_dir at module level
_BASE_DIR = Path(__file__).parent.parent.parent.resolve()


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FC_",  # FC_CACHE_DIR, FC_AUTH_URL, etc.
    )

    # Paths - computed from base_dir
    base_dir: Path = _BASE_DIR
    registry_path: Path = _BASE_DIR / "config" / "feeds.yml"
    cache_dir: Path = _BASE_DIR / "data" / "feeds"

    # HTTP service
    host: str = "0.0.0.0"
    port: int = 8000

    # Token oracle
    auth_url: str = "http://localhost:9000/checkToken"
    auth_timeout_seconds: float = 10.0

    # Ingestion
    fetch_timeout_seconds: int = 30
    fetch_user_agent: str = "FeedCacheBot/1.0"
    fetch_fallback_delay_seconds: float = 20.0
    fetch_fallback_max_attempts: int = 1
    fetch_backoff_multiplier: float = 1.0
    fetch_backoff_min_seconds: float = 1.0
    fetch_backoff_max_seconds: float = 60.0

    # Scheduling
    refresh_interval_seconds: int = 3 * 60 * 60
    refresh_max_overlapping_passes: int = 8

    # Logging
    log_level: str = "INFO"


settings = Settings()
