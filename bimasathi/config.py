"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "bimasathi"
    debug: bool = False
    log_level: str = "INFO"

    # Sessions idle longer than this are discarded by the store
    session_ttl_minutes: int = 60

    # Gemini LLM
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.2
    gemini_max_output_tokens: int = 2048

    model_config = {"env_prefix": "BIMASATHI_"}


settings = Settings()
