"""
TidyQuest — Centralized configuration.

Loads all settings from .env. Nothing is mandatory: the quest engine runs
fully offline, and the community bonfire is only enabled when InstantDB
credentials are present.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from tidyquest/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Local key-value store (SQLite)
    DATABASE_PATH: str = "data/tidyquest.db"

    # Quest catalog (JSON list of quests)
    CATALOG_PATH: str = "data/quests.json"

    # Community bonfire — InstantDB admin API
    INSTANT_APP_ID: str = ""
    INSTANT_ADMIN_TOKEN: str = ""
    INSTANT_API_URL: str = "https://api.instantdb.com/admin"
    COMMUNITY_TIMEOUT_SECONDS: float = 5.0
    RECENT_CONTRIBUTIONS_LIMIT: int = 10

    @field_validator("COMMUNITY_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def parse_timeout(cls, v: str | float) -> float:
        if isinstance(v, str) and not v.strip():
            return 5.0
        return float(v)

    @field_validator("RECENT_CONTRIBUTIONS_LIMIT", mode="before")
    @classmethod
    def parse_limit(cls, v: str | int) -> int:
        if isinstance(v, str) and not v.strip():
            return 10
        return int(v)

    @field_validator("INSTANT_API_URL", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/tidyquest.db"),
        CATALOG_PATH=os.getenv("CATALOG_PATH", "data/quests.json"),
        INSTANT_APP_ID=os.getenv("INSTANT_APP_ID", ""),
        INSTANT_ADMIN_TOKEN=os.getenv("INSTANT_ADMIN_TOKEN", ""),
        INSTANT_API_URL=os.getenv("INSTANT_API_URL", "https://api.instantdb.com/admin"),
        COMMUNITY_TIMEOUT_SECONDS=os.getenv("COMMUNITY_TIMEOUT_SECONDS", "5"),
        RECENT_CONTRIBUTIONS_LIMIT=os.getenv("RECENT_CONTRIBUTIONS_LIMIT", "10"),
    )


# Singleton — imported by all other modules as:
#   from tidyquest.config import settings
settings = _load_settings()
