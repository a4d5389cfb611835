"""Pydantic BaseSettings — relayer endpoint, credentials and polling defaults."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from env / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Application ─────────────────────────────────────────────
    APP_ENV: Literal["dev", "prod"] = "dev"
    APP_NAME: str = "safe-relayer-client"
    LOG_LEVEL: str = "INFO"

    # ── Relayer ─────────────────────────────────────────────────
    RELAYER_URL: str = "https://relayer-v2.polymarket.com"
    CHAIN_ID: int = 137
    HTTP_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)

    # ── Polling ─────────────────────────────────────────────────
    POLL_MAX_ATTEMPTS: int = Field(default=30, ge=1)
    POLL_INTERVAL_MS: int = Field(default=2000, ge=1000)

    # ── Credentials (never commit real values) ──────────────────
    PK: str = ""
    BUILDER_API_KEY: str = ""
    BUILDER_SECRET: str = ""
    BUILDER_PASS_PHRASE: str = ""


settings = Settings()
