"""Store: the single owner of the state document handed to every consumer."""

from __future__ import annotations

import datetime
import logging
import threading
from typing import Any, Callable, Dict, Hashable, List, Tuple

from life_organizer.core.config import get_save_debounce_seconds, get_storage_key
from life_organizer.core.db import refresh_engine_from_env
from life_organizer.models import AppState, default_state
from life_organizer.services import schedule_service, stats_service
from life_organizer.services.date_service import date_key
from life_organizer.services.persistence_service import (
    DebouncedWriter,
    DocumentStorage,
    SqlDocumentStorage,
    load_state,
)
from life_organizer.services.reducer_service import reduce

logger = logging.getLogger(__name__)

Listener = Callable[[AppState, AppState], None]


class Store:
    """Holds the current snapshot, applies actions and serves derived views.

    Only ``dispatch`` replaces the snapshot. Every accepted transition is
    handed to the writer (when one is attached) and to the listeners in the
    order the transitions happened; rejected actions return the same snapshot
    and trigger nothing. Listeners run under the store lock and may dispatch
    again from the same thread. Views are cached per snapshot, so the
    returned lists and dicts must be treated as read-only.
    """

    def __init__(
        self,
        initial_state: AppState | None = None,
        writer: DebouncedWriter | None = None,
        clock: Callable[[], datetime.date] | None = None,
    ):
        self._state = initial_state if initial_state is not None else default_state()
        self._writer = writer
        self._clock = clock or datetime.date.today
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self._view_cache: Dict[Tuple[Hashable, ...], Any] = {}

    @classmethod
    def open(
        cls,
        storage: DocumentStorage | None = None,
        key: str | None = None,
        delay: float | None = None,
        clock: Callable[[], datetime.date] | None = None,
    ) -> "Store":
        if storage is None:
            # 日本語: 既定は DATABASE_URL のデータベース / English: Default to the database named by DATABASE_URL
            refresh_engine_from_env()
            storage = SqlDocumentStorage()
        storage_key = key or get_storage_key()
        state = load_state(storage, storage_key)
        writer = DebouncedWriter(
            storage,
            storage_key,
            get_save_debounce_seconds() if delay is None else delay,
        )
        logger.info("Opened store %s", storage_key)
        return cls(state, writer=writer, clock=clock)

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def writer(self) -> DebouncedWriter | None:
        return self._writer

    def today(self) -> str:
        return date_key(self._clock())

    def dispatch(self, action: Any) -> AppState:
        with self._lock:
            previous = self._state
            next_state = reduce(previous, action)
            if next_state is previous:
                return previous
            self._state = next_state
            self._view_cache.clear()

            # 日本語: ロック内で保存予約と通知を行い遷移順を保つ / English: Schedule and notify under the lock so transitions keep their order
            if self._writer is not None:
                self._writer.schedule(next_state)
            for listener in list(self._listeners):
                try:
                    listener(previous, next_state)
                except Exception:
                    logger.exception("State listener %r failed", listener)
        return next_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def flush(self) -> bool:
        if self._writer is None:
            return False
        return self._writer.flush()

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()

    def _view(self, name: str, compute: Callable[..., Any], *args: Hashable) -> Any:
        # 日本語: スナップショットと引数ごとにメモ化、状態が変われば破棄 / English: Memoized per snapshot and arguments, dropped on every transition
        with self._lock:
            state = self._state
            cache_key = (name, *args)
            if cache_key in self._view_cache:
                return self._view_cache[cache_key]
        value = compute(state, *args)
        with self._lock:
            if self._state is state:
                self._view_cache[cache_key] = value
        return value

    def _day(self, date_value: Any = None) -> str:
        return date_key(date_value) if date_value is not None else self.today()

    def schedule_for(self, date_value: Any = None) -> List[Dict[str, Any]]:
        return self._view("schedule", schedule_service.daily_schedule, self._day(date_value))

    def completion_rate(self, date_value: Any = None) -> int:
        return self._view("completion", schedule_service.schedule_completion_rate, self._day(date_value))

    def day_tasks(self, date_value: Any = None):
        return schedule_service.day_tasks_for(self._state, self._day(date_value))

    def occupancy(self, dates: Any) -> Dict[str, bool]:
        days = tuple(date_key(value) for value in dates)
        return self._view("occupancy", schedule_service.occupancy_map, days)

    def week_occupancy(self, anchor: Any = None) -> Dict[str, bool]:
        return self._view("week_occupancy", schedule_service.week_occupancy, self._day(anchor))

    def weekly_expenses(self, today: Any = None) -> float:
        return self._view("weekly_expenses", stats_service.weekly_expenses, self._day(today))

    def monthly_expenses(self, today: Any = None) -> float:
        return self._view("monthly_expenses", stats_service.monthly_expenses, self._day(today))

    def top_categories(self, today: Any = None, limit: int = 3) -> List[Tuple[str, float]]:
        return self._view("top_categories", stats_service.top_categories, self._day(today), limit)

    def wallet_balances(self) -> Dict[str, float]:
        return self._view("wallet_balances", stats_service.wallet_balances)

    def habit_adherence(self, today: Any = None) -> int:
        return self._view("habit_adherence", stats_service.habit_week_adherence, self._day(today))

    def focus_week_seconds(self, today: Any = None) -> int:
        return self._view("focus_week", stats_service.focus_week_seconds, self._day(today))

    def focus_week_label(self, today: Any = None) -> str:
        return stats_service.format_focus_time(self.focus_week_seconds(today))

    def task_stats(self) -> Dict[str, int]:
        return self._view("task_stats", stats_service.task_completion_stats)


__all__ = ["Store", "Listener"]
