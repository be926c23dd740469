"""Database configuration."""

from pathlib import Path

from ..core.config import settings


def get_database_url() -> str:
    """
    Get the database URL from settings or default.

    Returns:
        Database URL string
    """
    if settings.database_url:
        return settings.database_url

    # Default to SQLite in ./data/
    db_dir = Path("data")
    db_dir.mkdir(parents=True, exist_ok=True)
    db_path = db_dir / "cinetime.db"

    return f"sqlite+aiosqlite:///{db_path}"


def get_database_echo() -> bool:
    """
    Check if database query logging is enabled.

    Returns:
        True if SQL queries should be logged
    """
    return settings.database_echo
