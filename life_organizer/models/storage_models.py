"""Storage SQLModel models."""

from __future__ import annotations

import datetime

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


# 日本語: 保存キーごとに1行で状態ドキュメント全体を保持 / English: One row per storage key holding the whole serialized document
class StoredDocument(SQLModel, table=True):
    __tablename__ = "stored_document"

    key: str = Field(primary_key=True, max_length=100)
    payload: str = Field(sa_column=Column(Text, nullable=False))
    # 日本語: タイムゾーン付き UTC で記録 / English: Stored as timezone-aware UTC
    updated_at: datetime.datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
