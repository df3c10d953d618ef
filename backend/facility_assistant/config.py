"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "VMCC Facility Assistant"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # Flat key/value store (JSON file holding the account list)
    data_file: Path = Path("data/store.json")
    users_key: str = "vmcc-users"

    # Client session cookie / JWT
    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24  # 1 day

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Cookies
    # Set to true when frontend and backend are on different domains
    # This uses samesite="none" + secure=True instead of samesite="lax"
    cookie_cross_domain: bool = False

    # Shared admin code gating admin registration and admin password resets.
    # A single static secret, not per-user access control.
    admin_code: str = "VMCC-ADMIN-2024"

    # Anthropic API. Optional: the gateway answers with a JSON error when unset.
    anthropic_api_key: str | None = None

    # LLM Configuration
    llm_model: str = "claude-sonnet-4-20250514"
    llm_max_tokens: int = 1024
    gateway_timeout_seconds: float = 60.0

    # Speech engine: "browser" relays speech to the client, "unsupported"
    # disables voice input and output for every session
    speech_engine: Literal["browser", "unsupported"] = "browser"

    # Speech output defaults
    default_voice_id: str | None = None
    default_speech_rate: float = Field(1.0, ge=0.5, le=2.0)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

