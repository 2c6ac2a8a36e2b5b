"""Core configuration for Life Organizer."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# 日本語: ルート直下の secrets.env を起動時に読み込む / English: Load root-level secrets.env on startup
load_dotenv("secrets.env")

# 日本語: プロジェクトルート基準パス / English: Project root directory
BASE_DIR = Path(__file__).resolve().parents[2]

# 日本語: ローカル SQLite ファイルを既定の保存先にする / English: Default to a local SQLite file
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite:///{BASE_DIR / 'instance' / 'life_organizer.db'}",
)

# 日本語: 永続化ドキュメントの保存キー / English: Storage key of the persisted document
STORAGE_KEY = os.getenv("STORAGE_KEY", "life-organizer-data")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def get_save_debounce_seconds() -> float:
    """Delay between the last accepted transition and the physical write."""
    # 日本語: 不正値は既定値、範囲は 0〜10 秒にクランプ / English: Fall back on bad input and clamp to 0-10 seconds
    raw_value = os.getenv("SAVE_DEBOUNCE_SECONDS", "0.5")
    try:
        parsed = float(raw_value)
    except (TypeError, ValueError):
        parsed = 0.5
    return max(0.0, min(parsed, 10.0))


def get_storage_key() -> str:
    # 日本語: 実行時の環境変数を優先 / English: Prefer runtime environment override
    return os.getenv("STORAGE_KEY", STORAGE_KEY) or STORAGE_KEY


def configure_logging(level: str | None = None) -> None:
    """Apply LOG_LEVEL to the root logger (entry points only)."""
    name = (level or os.getenv("LOG_LEVEL", LOG_LEVEL) or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
