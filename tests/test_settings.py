"""Tests for configuration loading."""

from cinetime_server.core.config import Settings


def test_default_settings(monkeypatch):
    """Test that default settings load correctly."""
    monkeypatch.delenv("CINETIME_DATABASE_URL", raising=False)

    settings = Settings(_env_file=None)

    assert settings.port == 8000
    assert settings.api_key is None
    assert settings.database_url is None
    assert settings.default_episode_runtime == 45
    assert settings.reconcile_interval_seconds == 0
    assert settings.tmdb_base_url == "https://api.themoviedb.org/3"


def test_settings_from_env(monkeypatch):
    """Test loading settings from environment variables."""
    monkeypatch.setenv("CINETIME_API_KEY", "secret")
    monkeypatch.setenv("CINETIME_DEFAULT_EPISODE_RUNTIME", "30")
    monkeypatch.setenv("CINETIME_RECONCILE_INTERVAL_SECONDS", "3600")

    settings = Settings(_env_file=None)

    assert settings.api_key == "secret"
    assert settings.default_episode_runtime == 30
    assert settings.reconcile_interval_seconds == 3600
