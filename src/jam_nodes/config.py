from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Workflow runner
    # ------------------------------------------------------------------
    # Upper bound on node invocations per run; stops graphs that loop forever
    max_workflow_steps: int = 1000
    default_user_id: str = "system"

    # ------------------------------------------------------------------
    # Outbound HTTP
    # ------------------------------------------------------------------
    http_user_agent: str = "jam-nodes/0.1"

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    notification_webhook_url: Optional[str] = None   # POST target for node notifications

    # ------------------------------------------------------------------
    # API
    # ------------------------------------------------------------------
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
