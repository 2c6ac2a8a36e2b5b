"""Seed helpers for demo/sample data."""

from __future__ import annotations

import datetime
from typing import List

from life_organizer.models import (
    Action,
    ActionType,
    DayTask,
    Event,
    FocusSession,
    Habit,
    Idea,
    Routine,
    Task,
    Transaction,
)
from life_organizer.models.state_models import WEEKDAYS
from life_organizer.services.store_service import Store


def seed_sample_data(store: Store, today: datetime.date | None = None) -> List[str]:
    # 日本語: 手動確認用の軽量サンプルデータ投入 / English: Seed lightweight sample data for manual verification
    today = today or datetime.date.today()
    day = today.isoformat()
    tomorrow = (today + datetime.timedelta(days=1)).isoformat()
    created_at = datetime.datetime.combine(today, datetime.time(9, 0)).isoformat()
    messages = []

    routine_id = "sample-routine-morning"
    # 日本語: 同じIDがあれば重複作成しない / English: Skip entities whose id already exists
    if not any(routine.id == routine_id for routine in store.state.routines):
        store.dispatch(
            Action(
                ActionType.ADD_ROUTINE,
                Routine(id=routine_id, title="Morning workout", time="07:00", days=WEEKDAYS),
            )
        )
        store.dispatch(Action(ActionType.ADD_ROUTINE, Routine(id="sample-routine-reading", title="Read a book", days=WEEKDAYS)))
        messages.append("Seeded daily routines")

    events = [
        Event(id="sample-event-lunch", title="Lunch with Alice", date=tomorrow, time="13:00"),
        Event(id="sample-event-dentist", title="Dentist", date=day, time="15:00"),
    ]
    for event in events:
        if not any(existing.id == event.id for existing in store.state.events):
            store.dispatch(Action(ActionType.ADD_EVENT, event))
            messages.append(f"Seeded Event '{event.title}' for {event.date}")

    if not store.state.day_tasks.get(day):
        tasks = tuple(
            DayTask(id=f"sample-day-task-{index}", title=title, date=day)
            for index, title in enumerate(["Finish report", "Call the bank", "Buy milk"], start=1)
        )
        store.dispatch(Action(ActionType.SET_DAY_TASKS, {"date": day, "tasks": tasks}))
        messages.append(f"Seeded key tasks for {day}")

    if not any(tx.id.startswith("sample-tx-") for tx in store.state.transactions):
        for index, (tx_type, amount, category) in enumerate(
            [("income", 50000, "Salary"), ("expense", 1200, "Food"), ("expense", 450, "Transport")],
            start=1,
        ):
            store.dispatch(
                Action(
                    ActionType.ADD_TRANSACTION,
                    Transaction(
                        id=f"sample-tx-{index}",
                        type=tx_type,
                        amount=amount,
                        date=day,
                        wallet_id="wallet-card",
                        category=category,
                        created_at=created_at,
                    ),
                )
            )
        messages.append("Seeded transactions")

    parent_id = "sample-task-move"
    if not any(task.id == parent_id for task in store.state.tasks):
        store.dispatch(
            Action(
                ActionType.ADD_TASK,
                Task(id=parent_id, title="Move to a new flat", priority="important", created_at=created_at),
            )
        )
        store.dispatch(
            Action(
                ActionType.BREAKDOWN_TASK,
                {
                    "parent_id": parent_id,
                    "subtasks": [
                        {"id": "sample-subtask-boxes", "title": "Buy boxes", "created_at": created_at},
                        {"id": "sample-subtask-van", "title": "Book a van", "created_at": created_at},
                    ],
                },
            )
        )
        messages.append("Seeded task with subtasks")

    habit_id = "sample-habit-water"
    if not any(habit.id == habit_id for habit in store.state.habits):
        store.dispatch(
            Action(
                ActionType.ADD_HABIT,
                Habit(id=habit_id, title="Drink water", icon="drink-water", color="#13b4ff", created_at=created_at),
            )
        )
        for offset in (2, 1, 0):
            record_day = (today - datetime.timedelta(days=offset)).isoformat()
            store.dispatch(Action(ActionType.TOGGLE_HABIT_RECORD, {"id": habit_id, "date": record_day}))
        messages.append("Seeded habit with a 3-day streak")

    if not store.state.ideas:
        store.dispatch(Action(ActionType.ADD_IDEA, Idea(id="sample-idea-1", text="Learn to bake bread", created_at=created_at)))
        messages.append("Seeded inbox idea")

    if not store.state.focus_sessions:
        store.dispatch(
            Action(
                ActionType.ADD_FOCUS_SESSION,
                FocusSession(
                    id="sample-focus-1",
                    task_id=parent_id,
                    task_title="Move to a new flat",
                    duration=25 * 60,
                    date=created_at,
                    completed=True,
                ),
            )
        )
        messages.append("Seeded focus session")

    return messages


__all__ = ["seed_sample_data"]
