# config.py

"""Application configuration utilities.

Values are primarily loaded from ``config.json`` and may be overridden by
environment variables. The :func:`get_settings` helper merges the two sources
and caches the result.
"""

from __future__ import annotations

import json
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Plan(str, Enum):
    """Subscription tiers a cafe can be on.

    ``BASIC`` is the implicit tier for cafes without an explicit plan, so any
    feature requiring ``PRO`` fails closed for them.
    """

    BASIC = "basic"
    PRO = "pro"


class Settings(BaseSettings):
    """Application settings merged from JSON and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./tabletap.db"
    redis_url: str = "redis://localhost:6379/0"
    secret_key: str = "change-me"
    session_cookie: str = "tt_session"
    session_ttl_minutes: int = 60 * 24
    login_code_ttl_secs: int = 300
    default_tz: str = "UTC"
    public_base_url: str = "http://localhost:3000"
    allowed_origins: str = ""
    auto_create_schema: bool = True
    query_cache_ttl_secs: int = 60
    vapid_public_key: str | None = None
    push_auto_close_secs: int = 10
    telegram_api_base: str = "https://api.telegram.org"
    telegram_timeout_secs: float = 10.0
    loyalty_spend_per_point: int = 10
    log_sample_2xx: float = 0.1


# Cached singleton to avoid repeated file reads
@lru_cache
def get_settings() -> Settings:
    """Return merged settings with environment variable precedence.

    The configuration is read from ``config.json`` located alongside this file
    and fed into :class:`Settings`. Environment variables override any values
    from the JSON file. The result is cached to prevent repeated disk reads.
    """

    config_path = Path(__file__).with_name("config.json")
    data = json.loads(config_path.read_text()) if config_path.exists() else {}
    env_override = {
        k.lower(): v
        for k, v in os.environ.items()
        if k.lower() in Settings.model_fields
    }
    merged = {**data, **env_override}
    # Environment variables override values from the JSON file.
    return Settings(**merged)
