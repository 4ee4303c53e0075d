"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    jwt_secret: str
    jwt_ttl_minutes: int = 60
    public_base_url: str = "http://localhost:8000"
    submission_rate_limit: int = 5
    submission_rate_window_ms: int = 60_000
    rate_limit_sweep_seconds: float = 300
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def submission_url(base_url: str, slug: str) -> str:
    """Return the public submission page for a project."""
    return f"{base_url.rstrip('/')}/comment/{slug}"


def presentation_url(base_url: str, slug: str) -> str:
    """Return the public presentation page for a project."""
    return f"{base_url.rstrip('/')}/present/{slug}"
