"""Application settings for the token table service."""
from __future__ import annotations

from datetime import date
from functools import lru_cache
import json
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Deployment dates reported by the feed for these tokens are wrong; the table
# uses the corrected date for age display and sorting.
DEFAULT_DEPLOY_DATE_OVERRIDES: dict[str, date] = {
    "0xc1fb593aeffbeb02f85e0308e9956a90": date(2024, 4, 16),  # PURR
}


class Settings(BaseSettings):
    """Strongly typed runtime configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TOKEN_TABLE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    feed_url: str = Field(
        default="https://hyperliquid-json-bucket.s3.eu-central-1.amazonaws.com/spot.json",
        description="URL of the full spot token snapshot (JSON list).",
    )
    refresh_interval_sec: float = Field(
        default=60.0,
        gt=0,
        description="Delay between two full snapshot refreshes.",
    )
    fetch_timeout_sec: float = Field(default=20.0, gt=0, description="HTTP timeout for a single snapshot fetch.")
    max_backoff_sec: float = Field(default=300.0, gt=0, description="Upper bound for the retry delay after failures.")
    trade_url_base: str = Field(
        default="https://app.hyperliquid.xyz/trade/",
        description="Prefix used to build the per-token trade link.",
    )
    deploy_date_overrides: Annotated[dict[str, date], NoDecode] = Field(
        default_factory=lambda: dict(DEFAULT_DEPLOY_DATE_OVERRIDES),
        description="Token id -> corrected deployment date.",
    )
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics endpoint.")
    log_level: str = Field(default="INFO", description="Application log level.")

    @field_validator("deploy_date_overrides", mode="before")
    @classmethod
    def _coerce_overrides(cls, value):
        if value in (None, "", {}):
            return {}
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return {}
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                parsed = {}
                for part in raw.split(","):
                    if "=" not in part:
                        continue
                    token_id, _, day = part.partition("=")
                    if token_id.strip() and day.strip():
                        parsed[token_id.strip()] = day.strip()
            value = parsed
        if not isinstance(value, dict):
            raise ValueError("deploy_date_overrides must map token ids to dates")
        return {str(key).strip(): day for key, day in value.items() if str(key).strip()}

    @field_validator("log_level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level '{value}'")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance to avoid repeated environment parsing."""

    return Settings()
