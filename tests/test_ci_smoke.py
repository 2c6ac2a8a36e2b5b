import datetime

import pytest

from life_organizer.core.config import get_save_debounce_seconds, get_storage_key
from life_organizer.core.db import _normalize_database_url
from life_organizer.services.date_service import add_days, date_key, trailing_dates, week_dates, weekday_tag


def test_date_key_keeps_only_calendar_date():
    assert date_key("2024-05-13T21:45:00.000Z") == "2024-05-13"
    assert date_key(datetime.datetime(2024, 5, 13, 23, 59)) == "2024-05-13"
    assert date_key(datetime.date(2024, 5, 13)) == "2024-05-13"


def test_add_days_handles_month_and_leap_day():
    assert add_days("2024-02-28", 1) == "2024-02-29"
    assert add_days("2023-02-28", 1) == "2023-03-01"
    assert add_days("not a date", 1) is None


def test_week_helpers_are_monday_based():
    assert weekday_tag("2024-05-13") == "mon"
    assert weekday_tag("2024-05-19") == "sun"
    assert week_dates("2024-05-19")[0] == "2024-05-13"
    assert week_dates("2024-05-13")[-1] == "2024-05-19"
    assert trailing_dates("2024-05-01", 3) == ["2024-05-01", "2024-04-30", "2024-04-29"]


def test_debounce_seconds_are_clamped(monkeypatch):
    monkeypatch.setenv("SAVE_DEBOUNCE_SECONDS", "120")
    assert get_save_debounce_seconds() == 10.0
    monkeypatch.setenv("SAVE_DEBOUNCE_SECONDS", "-3")
    assert get_save_debounce_seconds() == 0.0
    monkeypatch.setenv("SAVE_DEBOUNCE_SECONDS", "soon")
    assert get_save_debounce_seconds() == 0.5


def test_storage_key_override(monkeypatch):
    monkeypatch.setenv("STORAGE_KEY", "other-profile")
    assert get_storage_key() == "other-profile"


def test_database_url_normalization():
    assert _normalize_database_url("postgres://u:p@host/db") == "postgresql+psycopg2://u:p@host/db"
    assert _normalize_database_url("sqlite:///tmp/x.db") == "sqlite:///tmp/x.db"
    with pytest.raises(ValueError):
        _normalize_database_url("mysql://host/db")
