"""
Configuration management for the Plagiarism Report Service.
All settings loaded from environment variables with validation.
"""

from functools import lru_cache
from typing import List, Optional
from urllib.parse import quote

from pydantic import Field, field_validator, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # =============================================================================
    # DATABASE CONFIGURATION
    # =============================================================================
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="plagiarism_db", validation_alias="DB_NAME")
    db_user: str = Field(default="plagiarism_user", validation_alias="DB_USER")
    db_pass: str = Field(default="", validation_alias="DB_PASS")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_timeout: int = Field(default=30, validation_alias="DB_POOL_TIMEOUT")

    # "postgres" in deployments, "memory" for local runs without a database
    store_backend: str = Field(default="postgres", validation_alias="STORE_BACKEND")

    # =============================================================================
    # STORAGE SERVICE (FILE CATALOG)
    # =============================================================================
    storage_service_url: str = Field(default="http://localhost:5002", validation_alias="STORAGE_SERVICE_URL")
    catalog_timeout: float = Field(default=10.0, validation_alias="CATALOG_TIMEOUT")
    text_fetch_timeout: float = Field(default=30.0, validation_alias="TEXT_FETCH_TIMEOUT")

    # =============================================================================
    # REDIS CONFIGURATION
    # =============================================================================
    redis_host: Optional[str] = Field(default=None, validation_alias="REDIS_HOST")
    redis_port: int = Field(default=6379, validation_alias="REDIS_PORT")
    redis_db: int = Field(default=0, validation_alias="REDIS_DB")
    redis_password: Optional[str] = Field(default=None, validation_alias="REDIS_PASSWORD")
    redis_use_ssl: bool = Field(default=False, validation_alias="REDIS_USE_SSL")
    task_lock_timeout: float = Field(default=300.0, validation_alias="TASK_LOCK_TIMEOUT")

    # =============================================================================
    # API CONFIGURATION
    # =============================================================================
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    api_host: str = Field(default="0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(default=8000, validation_alias="API_PORT")
    cors_origins: str = Field(default="http://localhost:3000", validation_alias="CORS_ORIGINS")

    # =============================================================================
    # PLAGIARISM SETTINGS
    # =============================================================================
    ngram_size: int = Field(default=3, validation_alias="NGRAM_SIZE")
    plagiarism_threshold: float = Field(default=0.7, validation_alias="PLAGIARISM_THRESHOLD")
    analysis_concurrency: int = Field(default=8, validation_alias="ANALYSIS_CONCURRENCY")

    # =============================================================================
    # LOGGING
    # =============================================================================
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # =============================================================================
    # VALIDATORS
    # =============================================================================

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is valid."""
        allowed = {"development", "staging", "production"}
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        allowed = {"postgres", "memory"}
        if v.lower() not in allowed:
            raise ValueError(f"Store backend must be one of: {allowed}")
        return v.lower()

    @field_validator("plagiarism_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Ensure threshold is between 0 and 1."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("Threshold must be between 0.0 and 1.0")
        return v

    @field_validator("ngram_size")
    @classmethod
    def validate_ngram_size(cls, v: int) -> int:
        if v < 2:
            raise ValueError("N-gram size must be at least 2")
        return v

    @field_validator("analysis_concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Analysis concurrency must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    # =============================================================================
    # PROPERTIES
    # =============================================================================

    @property
    def db_async_url(self) -> str:
        """Generate async PostgreSQL URL."""
        return f"postgresql+asyncpg://{self.db_user}:{self.db_pass}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def db_sync_url(self) -> str:
        """Generate sync PostgreSQL URL (used by Alembic)."""
        return f"postgresql+psycopg2://{self.db_user}:{self.db_pass}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def redis_enabled(self) -> bool:
        return bool(self.redis_host)

    @property
    def redis_url(self) -> str:
        scheme = "rediss" if self.redis_use_ssl else "redis"
        auth = f":{quote(self.redis_password, safe='')}@" if self.redis_password else ""
        return f"{scheme}://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        return Settings()
    except ValidationError as e:
        print("Configuration Error:")
        print("=" * 60)
        for error in e.errors():
            field = " -> ".join(str(x) for x in error['loc'])
            print(f"  - {field}: {error['msg']}")
        print("=" * 60)
        print("\nPlease check your .env file and ensure all required variables are set.")
        raise SystemExit(1)


# Global settings instance
settings = get_settings()
