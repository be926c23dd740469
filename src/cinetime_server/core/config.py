"""Server configuration."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server configuration loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="CINETIME_",
        env_file=".env",
    )

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # API settings
    api_key: Optional[str] = None  # If set, required for maintenance endpoints

    # Database settings
    database_url: Optional[str] = None  # Default: sqlite+aiosqlite:///./data/cinetime.db
    database_echo: bool = False  # Enable SQL query logging for debugging

    # Episode tracking
    default_episode_runtime: int = 45  # Minutes, used when the catalog has no runtime
    recompute_lock_timeout: float = 5.0  # Seconds to wait for a show's recompute lock

    # Maintenance
    reconcile_interval_seconds: int = 0  # 0 disables scheduled orphan reconciliation

    # TMDB settings
    tmdb_api_key: Optional[str] = None  # TMDB v3 API key
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_language: str = "en-US"


settings = Settings()
