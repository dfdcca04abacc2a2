"""
Application settings.

Values come from (lowest to highest priority): defaults below, a `.env` file, environment variables prefixed `CHESSDUEL_`.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHESSDUEL_", env_file=".env", extra="ignore"
    )

    # --- provider ---
    api_key: str = ""
    api_base_url: str = "https://openrouter.ai/api/v1"
    app_title: str = "AI Chess Game"
    app_referer: str = "http://localhost"

    # --- completion requests ---
    request_timeout_s: float = Field(default=20.0, gt=0)
    max_tokens: int = Field(default=32000, ge=1)
    temperature: float = Field(default=0.5, ge=0.0, le=2.0)
    top_p: float = Field(default=0.8, ge=0.0, le=1.0)

    # --- model catalog ---
    catalog_timeout_s: float = Field(default=15.0, gt=0)
    catalog_page_guard: int = Field(default=15, ge=1)
    catalog_page_delay_s: float = Field(default=0.2, ge=0)

    # --- move adapter ---
    max_attempts: int = Field(default=25, ge=1)
    history_window: int = Field(default=10, ge=0)
    legal_moves_shown: int = Field(default=20, ge=1)
    legal_moves_attempts: int = Field(default=3, ge=0)

    # --- match loop ---
    move_delay_s: float = Field(default=1.2, ge=0)

    # --- persistence / logging ---
    database_url: str = "sqlite:///chessduel.db"
    log_level: str = "INFO"
    log_file: str | None = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
