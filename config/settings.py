"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    # Session budget and termination thresholds
    SESSION_BUDGET_SECONDS: int = Field(default=900, ge=1)
    WRAPUP_MARGIN_SECONDS: int = Field(default=180, ge=0)
    TURN_CAP: int = Field(default=10, ge=1)
    QUALITY_MIN_TURNS: int = Field(default=6, ge=1)

    # Follow-up generation
    GENERATION_TIMEOUT_S: float = Field(default=5.0, gt=0.0)
    FOLLOWUP_MAX_WORDS: int = 50
    MIN_GENERATED_CHARS: int = 10
    PROMPT_TRANSCRIPT_CHARS: int = 6000
    PRIOR_CONTEXT_CHARS: int = 500

    # LLM route used when no JSON route file is configured
    LLM_BASE_URL: str = "https://api.openai.com"
    LLM_ENDPOINT: str = "/v1/chat/completions"
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_API_KEY_ENV: str = "OPENAI_API_KEY"
    LLM_MAX_RETRIES: int = Field(default=1, ge=0)
    LLM_CONFIG_PATH: str | None = None
    LLM_ROUTE_NAME: str = "followup"

    GENERATE_BULLETS_ON_FINALIZE: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/interview.log"
    ENABLE_FILE_LOGS: bool = True
    LOG_MAX_BYTES: int = 5242880
    LOG_BACKUP_COUNT: int = 5

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
