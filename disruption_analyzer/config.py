"""
Analyzer configuration.
Loads settings from environment variables and .env file.
"""
from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="DISRUPTION_ANALYZER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Characters of extracted text kept as the per-document preview
    content_preview_chars: int = Field(default=500, ge=0)

    log_level: str = "INFO"
    log_file: Optional[Path] = None


settings = Settings()
