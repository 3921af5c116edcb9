"""Application configuration via environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration for the Risk Register."""

    # Application
    app_name: str = "Risk Register"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(default="development", pattern=r"^(development|staging|production)$")
    log_level: str = "INFO"
    log_format: str = "json"

    # API
    api_prefix: str = "/api"
    allowed_origins: str = "http://localhost:3000"
    rate_limit_default: str = "100/minute"
    rate_limit_enabled: bool = True

    # Storage
    storage_backend: str = Field(default="memory", pattern=r"^(memory|sql|supabase)$")
    database_url: str = "sqlite+aiosqlite:///./risk_register.db"

    # Hosted store (PostgREST / Supabase)
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_timeout: float = 10.0

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",")]

    model_config = {"env_prefix": "RISK_REGISTER_", "env_file": ".env", "extra": "ignore"}


def get_settings() -> Settings:
    """Return a settings instance read from the environment."""
    return Settings()
