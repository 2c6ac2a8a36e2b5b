"""Core package exports."""

from .config import (
    BASE_DIR,
    DATABASE_URL,
    LOG_LEVEL,
    STORAGE_KEY,
    configure_logging,
    get_save_debounce_seconds,
    get_storage_key,
)
from .db import Session, create_session, refresh_engine_from_env

__all__ = [
    "BASE_DIR",
    "DATABASE_URL",
    "LOG_LEVEL",
    "STORAGE_KEY",
    "configure_logging",
    "get_save_debounce_seconds",
    "get_storage_key",
    "Session",
    "create_session",
    "refresh_engine_from_env",
]
