"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "NGRAM_SIZE",
        "PLAGIARISM_THRESHOLD",
        "ANALYSIS_CONCURRENCY",
        "STORE_BACKEND",
        "ENVIRONMENT",
        "LOG_LEVEL",
        "REDIS_HOST",
        "REDIS_PASSWORD",
        "REDIS_DB",
        "REDIS_USE_SSL",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)


def load() -> Settings:
    return Settings(_env_file=None)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = load()
        assert settings.ngram_size == 3
        assert settings.plagiarism_threshold == 0.7
        assert settings.store_backend == "postgres"
        assert not settings.redis_enabled

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("NGRAM_SIZE", "4")
        monkeypatch.setenv("STORE_BACKEND", "Memory")
        monkeypatch.setenv("REDIS_HOST", "redis")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = load()

        assert settings.ngram_size == 4
        assert settings.store_backend == "memory"
        assert settings.redis_enabled
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("name, value", [
        ("NGRAM_SIZE", "1"),
        ("PLAGIARISM_THRESHOLD", "1.5"),
        ("ANALYSIS_CONCURRENCY", "0"),
        ("STORE_BACKEND", "sqlite"),
        ("ENVIRONMENT", "qa"),
        ("LOG_LEVEL", "verbose"),
    ])
    def test_rejects_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            load()

    def test_database_urls(self):
        settings = load()
        assert settings.db_async_url.startswith("postgresql+asyncpg://")
        assert settings.db_sync_url.startswith("postgresql+psycopg2://")

    def test_redis_url(self, monkeypatch):
        monkeypatch.setenv("REDIS_HOST", "redis")
        monkeypatch.setenv("REDIS_PASSWORD", "p@ss")
        monkeypatch.setenv("REDIS_DB", "2")

        assert load().redis_url == "redis://:p%40ss@redis:6379/2"

    def test_cors_origins_list(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
        assert load().cors_origins_list == ["http://a.test", "http://b.test"]
