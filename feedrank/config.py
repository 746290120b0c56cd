"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Ranking constants (shares, exponents) stay in core/domain_types.py; only operational
      knobs (window, TTL, timeout) are configurable
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://feedrank:feedrank@db:5432/feedrank"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Ranking
    trending_window_hours: int = Field(48, ge=1, le=168)
    trending_cache_ttl_seconds: int = Field(300, ge=1)
    default_feed_limit: int = Field(20, ge=1, le=100)

    # Caller-enforced deadline for one feed assembly
    feed_timeout_seconds: float = Field(10.0, gt=0)

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def trending_window(self) -> timedelta:
        return timedelta(hours=self.trending_window_hours)

    @property
    def trending_cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.trending_cache_ttl_seconds)


@lru_cache
def get_settings() -> Settings:
    return Settings()
