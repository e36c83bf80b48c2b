"""Runtime configuration for the querypanel service."""
from functools import lru_cache
from typing import Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    app_env: str = "development"
    log_level: str = "INFO"

    # Retrieval backend; the only setting the query-session core depends on.
    api_base_url: AnyHttpUrl = "http://localhost:8000"
    search_top_k: int = 5
    request_timeout_seconds: Optional[float] = None

    max_sessions: int = 1000
    session_idle_ttl_seconds: float = 1800.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="QUERYPANEL_",
        env_ignore_empty=True,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor used across the codebase."""

    return Settings()  # type: ignore[arg-type]


settings = get_settings()
