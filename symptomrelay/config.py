"""Environment configuration."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Completion provider settings
    completion_provider: Literal["openai", "anthropic"] = "openai"
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    anthropic_api_key: Optional[str] = None

    # LLM settings
    model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    temperature: float = Field(default=0.3, gt=0.0, le=1.0)
    max_tokens: int = 1024
    completion_timeout: float = Field(default=30.0, gt=0)
    completion_max_retries: int = Field(default=1, ge=0, le=3)
    completion_retry_backoff: float = 1.0

    # Relay settings
    database_path: str = "symptomrelay.db"
    reuse_previous_analysis: bool = True
    default_risk_level: Literal["low", "medium", "high"] = "medium"

    # HTTP surface
    relay_auth_token: Optional[str] = None
    cors_allow_origins: list[str] = ["*"]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
