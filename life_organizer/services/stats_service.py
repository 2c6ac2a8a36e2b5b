"""Weekly and monthly aggregates for finance, habits, focus and tasks."""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Tuple

from life_organizer.models import AppState, Habit, Idea, Task, Transaction
from life_organizer.services.date_service import date_key, month_key, trailing_dates, week_dates


def _expenses(transactions: Iterable[Transaction]) -> List[Transaction]:
    return [tx for tx in transactions if tx.type == "expense"]


def expense_total(state: AppState, dates: Iterable[Any]) -> float:
    days = {date_key(value) for value in dates}
    return sum(tx.amount for tx in _expenses(state.transactions) if tx.date in days)


def weekly_expenses(state: AppState, today: Any) -> float:
    """Expenses over the trailing 7 days ending at ``today``."""
    return expense_total(state, trailing_dates(today, 7))


def monthly_expenses(state: AppState, today: Any) -> float:
    month = month_key(today)
    return sum(tx.amount for tx in _expenses(state.transactions) if tx.date[:7] == month)


def top_categories(state: AppState, today: Any, limit: int = 3) -> List[Tuple[str, float]]:
    month = month_key(today)
    category_totals: Dict[str, float] = {}
    for tx in _expenses(state.transactions):
        if tx.date[:7] != month:
            continue
        category_totals[tx.category] = category_totals.get(tx.category, 0) + tx.amount
    # 日本語: sorted は安定なので同額は最初に出たカテゴリが先 / English: Stable sort, ties keep first-encountered order
    ranked = sorted(category_totals.items(), key=lambda entry: entry[1], reverse=True)
    return ranked[:limit]


def wallet_balances(state: AppState) -> Dict[str, float]:
    totals = {"total": 0.0, "cash": 0.0, "card": 0.0}
    for wallet in state.wallets:
        totals["total"] += wallet.balance
        totals[wallet.type] += wallet.balance
    return totals


def ledger_delta(state: AppState, wallet_id: str) -> float:
    """Net amount the transaction ledger records for a wallet (income minus expense)."""
    delta = 0.0
    for tx in state.transactions:
        if tx.wallet_id != wallet_id:
            continue
        delta += tx.amount if tx.type == "income" else -tx.amount
    return delta


def sorted_transactions(state: AppState) -> List[Transaction]:
    """Newest first, by creation timestamp when present, else by date."""
    return sorted(state.transactions, key=lambda tx: tx.created_at or tx.date, reverse=True)


def transactions_by_date(state: AppState) -> Dict[str, List[Transaction]]:
    grouped: Dict[str, List[Transaction]] = defaultdict(list)
    for tx in sorted_transactions(state):
        grouped[tx.date].append(tx)
    return dict(sorted(grouped.items(), key=lambda entry: entry[0], reverse=True))


def wallet_name(state: AppState, wallet_id: str, fallback: str = "Unknown wallet") -> str:
    for wallet in state.wallets:
        if wallet.id == wallet_id:
            return wallet.name
    return fallback


def habit_week_fraction(habit: Habit, today: Any) -> float:
    records = set(habit.records)
    completed = sum(1 for day in trailing_dates(today, 7) if day in records)
    return completed / 7


def habit_week_adherence(state: AppState, today: Any) -> int:
    """Average 7-day completion across habits, as a whole percent."""
    if not state.habits:
        return 0
    total_percent = sum(habit_week_fraction(habit, today) * 100 for habit in state.habits)
    # 日本語: 0.5 は切り上げ（round の偶数丸めを避ける） / English: Halves round up, unlike banker's rounding in round()
    return int(math.floor(total_percent / len(state.habits) + 0.5))


def focus_week_seconds(state: AppState, today: Any) -> int:
    days = set(week_dates(today))
    total = 0
    for session in state.focus_sessions:
        if date_key(session.date) in days and session.duration > 0:
            total += session.duration
    return total


def format_focus_time(total_seconds: int) -> str:
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    if hours > 0:
        return f"{hours} h {minutes} min"
    return f"{total_seconds // 60} min"


def task_completion_stats(state: AppState) -> Dict[str, int]:
    root_tasks = [task for task in state.tasks if not task.parent_id]
    completed = sum(1 for task in root_tasks if task.completed)
    total = len(root_tasks)
    percent = int(math.floor(completed / total * 100 + 0.5)) if total else 0
    return {"completed": completed, "total": total, "percent": percent}


def subtasks_of(state: AppState, parent_id: str) -> List[Task]:
    return [task for task in state.tasks if task.parent_id == parent_id]


def someday_tasks(state: AppState) -> List[Task]:
    return [task for task in state.tasks if not task.date and not task.parent_id]


def tasks_for_date(state: AppState, date_value: Any) -> List[Task]:
    day = date_key(date_value)
    return [task for task in state.tasks if task.date == day and not task.parent_id]


def active_ideas(state: AppState) -> List[Idea]:
    return sorted(
        (idea for idea in state.ideas if idea.status == "active"),
        key=lambda idea: idea.created_at,
        reverse=True,
    )


__all__ = [
    "expense_total",
    "weekly_expenses",
    "monthly_expenses",
    "top_categories",
    "wallet_balances",
    "ledger_delta",
    "sorted_transactions",
    "transactions_by_date",
    "wallet_name",
    "habit_week_fraction",
    "habit_week_adherence",
    "focus_week_seconds",
    "format_focus_time",
    "task_completion_stats",
    "subtasks_of",
    "someday_tasks",
    "tasks_for_date",
    "active_ideas",
]
