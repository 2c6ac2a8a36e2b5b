"""Calendar date helpers shared by the reducer and the views."""

from __future__ import annotations

import datetime
from typing import Any, List

from dateutil import parser as date_parser

from life_organizer.models.state_models import WEEKDAYS


def _parse_date(value: Any, default_date: datetime.date | None = None) -> datetime.date | None:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            try:
                return date_parser.parse(value).date()
            except (ValueError, TypeError, OverflowError):
                return default_date
    return default_date


def date_key(value: Any) -> str:
    """Calendar date string (YYYY-MM-DD) used as key everywhere in the document."""
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    # 日本語: ISO 日時文字列は日付部分のみ使う / English: ISO datetime strings keep only the date part
    return str(value).split("T", 1)[0]


def add_days(date_str: str, days: int) -> str | None:
    parsed = _parse_date(date_str)
    if parsed is None:
        return None
    return (parsed + datetime.timedelta(days=days)).isoformat()


def weekday_tag(value: Any) -> str | None:
    parsed = _parse_date(value)
    if parsed is None:
        return None
    return WEEKDAYS[parsed.weekday()]


def _week_bounds(anchor_date: datetime.date) -> tuple[datetime.date, datetime.date]:
    start = anchor_date - datetime.timedelta(days=anchor_date.weekday())
    end = start + datetime.timedelta(days=6)
    return start, end


def week_dates(anchor: Any) -> List[str]:
    """Monday-based week containing ``anchor``."""
    start, _ = _week_bounds(_parse_date(anchor))
    return [(start + datetime.timedelta(days=offset)).isoformat() for offset in range(7)]


def trailing_dates(today: Any, days: int = 7) -> List[str]:
    """``days`` calendar dates ending at ``today`` inclusive, newest first."""
    end = _parse_date(today)
    return [(end - datetime.timedelta(days=offset)).isoformat() for offset in range(days)]


def month_key(value: Any) -> str:
    return date_key(value)[:7]


__all__ = [
    "_parse_date",
    "_week_bounds",
    "date_key",
    "add_days",
    "weekday_tag",
    "week_dates",
    "trailing_dates",
    "month_key",
]
