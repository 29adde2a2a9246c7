"""Application configuration for AchieveSync API.

Settings are read from ``ACHIEVESYNC_*`` environment variables and an
optional ``.env`` file.

Example:
    $ ACHIEVESYNC_POLL_INTERVAL=2.5 uvicorn main:app
"""

from __future__ import annotations

import os
import pathlib
from typing import List, Optional

import pydantic
import pydantic_settings

from adapters.steam_client import DEFAULT_CLIENT_PROCESS_NAMES, DEFAULT_CLIENT_TOOL_DIRS
from core.name_cache import DEFAULT_LOOKUP_TIMEOUT, STORE_APPDETAILS_URL


class Settings(pydantic_settings.BaseSettings):
    """Runtime configuration of the sync engine and HTTP service."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix="ACHIEVESYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    POLL_INTERVAL: float = 1.0  # seconds between detection cycles
    NAME_LOOKUP_TIMEOUT: float = DEFAULT_LOOKUP_TIMEOUT
    STORE_APPDETAILS_URL: str = STORE_APPDETAILS_URL
    STEAM_ROOT: Optional[pathlib.Path] = None  # None = search default locations
    CLIENT_PROCESS_NAMES: List[str] = list(DEFAULT_CLIENT_PROCESS_NAMES)
    CLIENT_TOOL_DIRS: List[str] = list(DEFAULT_CLIENT_TOOL_DIRS)  # globs under steamapps/common
    STATUS_HISTORY_SIZE: int = 50
    ENABLE_SIMULATE_ENDPOINT: bool = True

    @pydantic.field_validator("POLL_INTERVAL", "NAME_LOOKUP_TIMEOUT")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v


def get_settings(env_file: Optional[str] = None) -> Settings:
    """Create settings, optionally from an explicit ``.env`` file.

    Args:
        env_file: Path to a .env file; defaults to ``ACHIEVESYNC_ENV_FILE``.

    Raises:
        FileNotFoundError: If the given .env file doesn't exist.
    """
    env_file_path = env_file or os.getenv("ACHIEVESYNC_ENV_FILE")
    if not env_file_path:
        return Settings()

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f"Environment file not found: {resolved_path}")
    return Settings(_env_file=resolved_path)
