"""Tests for configuration loading."""

from config import DEFAULT_DATABASE_URL, ONE_DAY, Settings

ENV_VARS = [
    "DATABASE_URL",
    "ADMIN_USERNAME",
    "ADMIN_PASSWORD",
    "SESSION_SECRET",
    "SESSION_MAX_AGE",
    "ENVIRONMENT",
    "CORS_ORIGINS",
    "LOG_LEVEL",
    "LOG_DIR",
]


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self, monkeypatch):
        clear_env(monkeypatch)
        settings = Settings.from_env()

        assert settings.database_url == DEFAULT_DATABASE_URL
        assert settings.session_max_age == ONE_DAY
        assert settings.credentials_configured is False
        assert settings.cookie_secure is False
        assert settings.session_secret_generated is True
        assert len(settings.session_secret) >= 32
        assert "http://localhost:3000" in settings.cors_origins

    def test_from_env(self, monkeypatch):
        clear_env(monkeypatch)
        monkeypatch.setenv("DATABASE_URL", "postgresql://crm@db/crm")
        monkeypatch.setenv("ADMIN_USERNAME", "admin")
        monkeypatch.setenv("ADMIN_PASSWORD", "pw")
        monkeypatch.setenv("SESSION_SECRET", "fixed")
        monkeypatch.setenv("SESSION_MAX_AGE", "3600")
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("CORS_ORIGINS", "https://crm.example.com, https://admin.example.com")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.database_url == "postgresql://crm@db/crm"
        assert settings.credentials_configured is True
        assert settings.session_secret == "fixed"
        assert settings.session_secret_generated is False
        assert settings.session_max_age == 3600
        assert settings.cookie_secure is True
        assert settings.cors_origins == ["https://crm.example.com", "https://admin.example.com"]
        assert settings.log_level == "DEBUG"

    def test_partial_credentials_not_configured(self, monkeypatch):
        clear_env(monkeypatch)
        monkeypatch.setenv("ADMIN_USERNAME", "admin")
        assert Settings.from_env().credentials_configured is False

    def test_generated_secrets_differ(self):
        assert Settings().session_secret != Settings().session_secret
