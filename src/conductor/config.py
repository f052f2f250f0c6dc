"""Configuration management for Conductor."""
from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Timings are expressed in seconds.
    """

    # Application
    APP_NAME: str = "Conductor"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Worker pool and scheduling
    WORKER_POOL_SIZE: int = Field(default=4, ge=1)
    SCHEDULER_TICK_INTERVAL: float = Field(default=0.2, gt=0)  # Seconds between ticks
    TASK_EXECUTION_DELAY: float = Field(default=1.5, ge=0)  # Simulated task latency
    CLICK_PULSE_DURATION: float = Field(default=0.5, ge=0)  # Action flag reset delay

    # Plan source (Gemini)
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com"
    PLAN_SOURCE_TIMEOUT: float = 30.0

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Singleton settings instance
    """
    return Settings()
