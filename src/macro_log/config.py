"""Application configuration."""

import os
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    state_path: Path = Path("macro_log_state.json")
    estimation_backend: Literal["edge", "openai"] = "edge"
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_image_bucket: str = "food-images"
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "medium"
    openai_store: bool = False
    estimation_timeout_seconds: float = 60.0
    prune_after_logs: int = 200
    prune_keep_days: int = 90
    prune_keep_recent: int = 300
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
