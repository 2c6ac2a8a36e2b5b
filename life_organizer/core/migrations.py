"""Alembic helpers that bring the stored_document schema up to date."""

from __future__ import annotations

from alembic import command
from alembic.config import Config

from life_organizer.core.config import BASE_DIR


def _build_alembic_config(database_url: str) -> Config:
    # 日本語: カレントディレクトリに依存せずルートの alembic.ini を使う / English: Resolve alembic.ini from the project root, not the cwd
    config = Config(str(BASE_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BASE_DIR / "migrations"))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def upgrade_to_head(database_url: str) -> None:
    """Create or upgrade the document table in ``database_url``."""
    command.upgrade(_build_alembic_config(database_url), "head")
