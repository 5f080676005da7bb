"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    openai_store: bool = False
    vision_api_url: str
    vision_api_key: str | None = None
    vision_api_timeout_seconds: float = 30.0
    storage_bucket: str = "photos"
    signed_url_ttl_seconds: int = 3600
    metrics_batch_size: int = 20
    narrative_batch_size: int = 5
    narrative_enabled: bool = True
    run_emotion: bool = True
    run_embedding: bool = False
    stall_poll_interval_seconds: float = 3.0
    stall_threshold_cycles: int = 6
    analysis_job_max_attempts: int = 3
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
