"""Day schedule and calendar views."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple

from life_organizer.models import AppState, DayTask, Event, Routine
from life_organizer.services.date_service import date_key, week_dates, weekday_tag

# 日本語: 時刻なしの項目は実在する全時刻より後ろに並ぶ / English: Items without time sort after every real time
NO_TIME_SORT_KEY = "99:99"


def routines_for_date(state: AppState, date_value: Any) -> List[Routine]:
    weekday = weekday_tag(date_value)
    if weekday is None:
        return []
    return [routine for routine in state.routines if weekday in routine.days]


def events_for_date(state: AppState, date_value: Any) -> List[Event]:
    day = date_key(date_value)
    return [event for event in state.events if event.date == day]


def daily_schedule(state: AppState, date_value: Any) -> List[Dict[str, Any]]:
    day = date_key(date_value)
    timeline_items = []

    for routine in routines_for_date(state, day):
        timeline_items.append(
            {
                "type": "routine",
                "id": routine.id,
                "title": routine.title,
                "time": routine.time,
                "sort_key": routine.time or NO_TIME_SORT_KEY,
                "done": routine.completed.get(day, False),
                "item": routine,
            }
        )

    for event in events_for_date(state, day):
        timeline_items.append(
            {
                "type": "event",
                "id": event.id,
                "title": event.title,
                "time": event.time,
                "sort_key": event.time or NO_TIME_SORT_KEY,
                "done": event.completed,
                "item": event,
            }
        )

    # 日本語: 安定ソートなので同時刻はルーチン→イベントの挿入順を保つ / English: Stable sort keeps routines-then-events insertion order on ties
    timeline_items.sort(key=lambda item: item["sort_key"])
    return timeline_items


def schedule_completion_rate(state: AppState, date_value: Any) -> int:
    timeline_items = daily_schedule(state, date_value)
    if not timeline_items:
        return 0
    completed_items = sum(1 for item in timeline_items if item["done"])
    return int((completed_items / len(timeline_items)) * 100)


def day_tasks_for(state: AppState, date_value: Any) -> Tuple[DayTask, ...]:
    return state.day_tasks.get(date_key(date_value), ())


def day_task_progress(state: AppState, date_value: Any) -> Tuple[int, int]:
    """(completed, total) key tasks for the date."""
    tasks = day_tasks_for(state, date_value)
    return sum(1 for task in tasks if task.completed), len(tasks)


def occupancy_map(state: AppState, dates: Iterable[Any]) -> Dict[str, bool]:
    """Per-date flag telling whether anything is scheduled, for calendar indicators."""
    days = [date_key(value) for value in dates]
    event_days = {event.date for event in state.events}
    routine_weekdays = {weekday for routine in state.routines for weekday in routine.days}

    occupancy = {}
    for day in days:
        occupancy[day] = (
            day in event_days
            or bool(state.day_tasks.get(day))
            or weekday_tag(day) in routine_weekdays
        )
    return occupancy


def week_occupancy(state: AppState, anchor: Any) -> Dict[str, bool]:
    return occupancy_map(state, week_dates(anchor))


__all__ = [
    "NO_TIME_SORT_KEY",
    "routines_for_date",
    "events_for_date",
    "daily_schedule",
    "schedule_completion_rate",
    "day_tasks_for",
    "day_task_progress",
    "occupancy_map",
    "week_occupancy",
]
