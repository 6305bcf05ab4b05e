from __future__ import annotations
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .game_logic.constants import RECONNECT_GRACE_SECONDS, TURN_TIME_SECONDS


class Settings(BaseSettings):
    """Server settings read from ``KOTOBA_*`` environment variables or ``.env``."""

    turn_time_seconds: float = TURN_TIME_SECONDS
    reconnect_grace_seconds: float = RECONNECT_GRACE_SECONDS
    dictionary_path: Optional[Path] = None

    log_level: str = 'INFO'
    cors_origins: List[str] = ['*']

    model_config = SettingsConfigDict(
        env_prefix='KOTOBA_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
