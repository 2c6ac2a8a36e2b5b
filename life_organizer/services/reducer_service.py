"""Pure state transitions for every action in the protocol."""

from __future__ import annotations

import datetime
import logging
import math
from typing import Any, Callable, Dict, Iterable, Mapping, Tuple, Type, TypeVar

from life_organizer.models import (
    Action,
    ActionType,
    AppState,
    BreakdownPayload,
    DateRef,
    DayTask,
    DayTaskPayload,
    DayTaskRef,
    DayTasksPayload,
    Document,
    Event,
    FocusSession,
    Habit,
    Idea,
    Profile,
    Routine,
    Task,
    Transaction,
    Wallet,
)
from life_organizer.models.state_models import MAX_DAY_TASKS, StateModel
from life_organizer.services.date_service import _parse_date, add_days, date_key
from life_organizer.services.persistence_service import merge_with_defaults

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=StateModel)
Handler = Callable[[AppState, Any], AppState]


def _coerce(model: Type[ModelT], payload: Any) -> ModelT:
    if isinstance(payload, model):
        return payload
    return model.model_validate(payload)


def _coerce_id(payload: Any) -> str:
    if isinstance(payload, str) and payload:
        return payload
    if isinstance(payload, Mapping) and isinstance(payload.get("id"), str):
        return payload["id"]
    raise ValueError(f"identifier payload expected, got {type(payload).__name__}")


def _coerce_text(payload: Any) -> str:
    if not isinstance(payload, str):
        raise ValueError(f"text payload expected, got {type(payload).__name__}")
    return payload.strip()


def _with(state: AppState, **changes: Any) -> AppState:
    # 日本語: 変更したフィールド以外は前の状態と共有 / English: Untouched fields stay shared with the previous state
    return state.model_copy(update=changes)


def _index_of(items: Iterable[Any], entity_id: str) -> int:
    for index, item in enumerate(items):
        if item.id == entity_id:
            return index
    return -1


def _replace_at(items: Tuple[Any, ...], index: int, item: Any) -> Tuple[Any, ...]:
    return items[:index] + (item,) + items[index + 1:]


def _replace_entity(items: Tuple[ModelT, ...], entity: ModelT) -> Tuple[ModelT, ...] | None:
    index = _index_of(items, entity.id)
    if index < 0:
        return None
    return _replace_at(items, index, entity)


def _update_entity(
    items: Tuple[ModelT, ...], entity_id: str, change: Callable[[ModelT], ModelT | None]
) -> Tuple[ModelT, ...] | None:
    index = _index_of(items, entity_id)
    if index < 0:
        return None
    updated = change(items[index])
    if updated is None:
        return None
    return _replace_at(items, index, updated)


def _remove_entity(items: Tuple[ModelT, ...], entity_id: str) -> Tuple[ModelT, ...] | None:
    remaining = tuple(item for item in items if item.id != entity_id)
    if len(remaining) == len(items):
        return None
    return remaining


def _toggle_completed(item: ModelT) -> ModelT:
    return item.model_copy(update={"completed": not item.completed})


def _adder(field: str, model: Type[StateModel]) -> Handler:
    def handler(state: AppState, payload: Any) -> AppState:
        entity = _coerce(model, payload)
        return _with(state, **{field: getattr(state, field) + (entity,)})

    return handler


def _updater(field: str, model: Type[StateModel]) -> Handler:
    def handler(state: AppState, payload: Any) -> AppState:
        entity = _coerce(model, payload)
        items = _replace_entity(getattr(state, field), entity)
        if items is None:
            return state
        return _with(state, **{field: items})

    return handler


def _deleter(field: str) -> Handler:
    def handler(state: AppState, payload: Any) -> AppState:
        items = _remove_entity(getattr(state, field), _coerce_id(payload))
        if items is None:
            return state
        return _with(state, **{field: items})

    return handler


def _toggler(field: str) -> Handler:
    def handler(state: AppState, payload: Any) -> AppState:
        items = _update_entity(getattr(state, field), _coerce_id(payload), _toggle_completed)
        if items is None:
            return state
        return _with(state, **{field: items})

    return handler


def _toggle_routine(state: AppState, payload: Any) -> AppState:
    ref = _coerce(DateRef, payload)
    day = date_key(ref.date)

    def change(routine: Routine) -> Routine:
        # 日本語: エントリは削除せず真偽のみ反転 / English: Entries are never removed, only flipped
        completed = dict(routine.completed)
        completed[day] = not completed.get(day, False)
        return routine.model_copy(update={"completed": completed})

    routines = _update_entity(state.routines, ref.id, change)
    if routines is None:
        return state
    return _with(state, routines=routines)


def _move_event_to_tomorrow(state: AppState, payload: Any) -> AppState:
    def change(event: Event) -> Event | None:
        next_day = add_days(event.date, 1)
        if next_day is None:
            logger.warning("Event %s has an unreadable date %r; not moved", event.id, event.date)
            return None
        return event.model_copy(update={"date": next_day})

    events = _update_entity(state.events, _coerce_id(payload), change)
    if events is None:
        return state
    return _with(state, events=events)


def _check_task_dates(day: str, tasks: Iterable[DayTask]) -> None:
    for task in tasks:
        if date_key(task.date) != day:
            raise ValueError(f"key task {task.id} is dated {task.date}, not {day}")


def _with_day_tasks(state: AppState, day: str, tasks: Tuple[DayTask, ...]) -> AppState:
    day_tasks = dict(state.day_tasks)
    day_tasks[day] = tasks
    return _with(state, day_tasks=day_tasks)


def _set_day_tasks(state: AppState, payload: Any) -> AppState:
    data = _coerce(DayTasksPayload, payload)
    _check_task_dates(date_key(data.date), data.tasks)
    if len(data.tasks) > MAX_DAY_TASKS:
        logger.info("Rejected %d day tasks for %s (limit %d)", len(data.tasks), data.date, MAX_DAY_TASKS)
        return state
    return _with_day_tasks(state, date_key(data.date), data.tasks)


def _add_day_task(state: AppState, payload: Any) -> AppState:
    data = _coerce(DayTaskPayload, payload)
    day = date_key(data.date)
    _check_task_dates(day, (data.task,))
    existing = state.day_tasks.get(day, ())
    if len(existing) >= MAX_DAY_TASKS:
        logger.info("Rejected day task %s: %s already has %d", data.task.id, day, MAX_DAY_TASKS)
        return state
    return _with_day_tasks(state, day, existing + (data.task,))


def _update_day_task(state: AppState, payload: Any) -> AppState:
    data = _coerce(DayTaskPayload, payload)
    day = date_key(data.date)
    _check_task_dates(day, (data.task,))
    tasks = _replace_entity(state.day_tasks.get(day, ()), data.task)
    if tasks is None:
        return state
    return _with_day_tasks(state, day, tasks)


def _delete_day_task(state: AppState, payload: Any) -> AppState:
    ref = _coerce(DayTaskRef, payload)
    day = date_key(ref.date)
    tasks = _remove_entity(state.day_tasks.get(day, ()), ref.task_id)
    if tasks is None:
        return state
    return _with_day_tasks(state, day, tasks)


def _toggle_day_task(state: AppState, payload: Any) -> AppState:
    ref = _coerce(DayTaskRef, payload)
    day = date_key(ref.date)
    tasks = _update_entity(state.day_tasks.get(day, ()), ref.task_id, _toggle_completed)
    if tasks is None:
        return state
    return _with_day_tasks(state, day, tasks)


def _add_transaction(state: AppState, payload: Any) -> AppState:
    transaction = _coerce(Transaction, payload)
    # 日本語: 金額は常に正の有限値 / English: Amount must be a positive finite number
    if not (math.isfinite(transaction.amount) and transaction.amount > 0):
        logger.info("Rejected transaction %s with amount %r", transaction.id, transaction.amount)
        return state
    return _with(state, transactions=state.transactions + (transaction,))


def _add_category(state: AppState, payload: Any) -> AppState:
    category = _coerce_text(payload)
    if not category or category in state.categories:
        return state
    return _with(state, categories=state.categories + (category,))


def _breakdown_task(state: AppState, payload: Any) -> AppState:
    data = _coerce(BreakdownPayload, payload)
    if not data.subtasks or _index_of(state.tasks, data.parent_id) < 0:
        return state
    subtasks = tuple(task.model_copy(update={"parent_id": data.parent_id}) for task in data.subtasks)
    return _with(state, tasks=state.tasks + subtasks)


def _record_runs(records: Iterable[str]) -> list[int]:
    days = sorted({parsed for parsed in (_parse_date(item) for item in records) if parsed is not None})
    runs: list[int] = []
    previous: datetime.date | None = None
    for day in days:
        if previous is not None and day - previous == datetime.timedelta(days=1):
            runs[-1] += 1
        else:
            runs.append(1)
        previous = day
    return runs


def habit_streaks(records: Iterable[str]) -> tuple[int, int]:
    """Current streak (run ending at the latest record) and longest run."""
    runs = _record_runs(records)
    if not runs:
        return 0, 0
    return runs[-1], max(runs)


def _toggle_habit_record(state: AppState, payload: Any) -> AppState:
    ref = _coerce(DateRef, payload)
    day = date_key(ref.date)

    def change(habit: Habit) -> Habit:
        if day in habit.records:
            records = tuple(item for item in habit.records if item != day)
        else:
            records = tuple(sorted(habit.records + (day,)))
        streak, longest = habit_streaks(records)
        return habit.model_copy(
            update={
                "records": records,
                "streak": streak,
                "best_streak": max(habit.best_streak, longest),
            }
        )

    habits = _update_entity(state.habits, ref.id, change)
    if habits is None:
        return state
    return _with(state, habits=habits)


def _process_idea(state: AppState, payload: Any) -> AppState:
    def change(idea: Idea) -> Idea | None:
        if idea.status == "processed":
            return None
        return idea.model_copy(update={"status": "processed"})

    ideas = _update_entity(state.ideas, _coerce_id(payload), change)
    if ideas is None:
        return state
    return _with(state, ideas=ideas)


def _update_profile(state: AppState, payload: Any) -> AppState:
    return _with(state, profile=_coerce(Profile, payload))


def _add_goal(state: AppState, payload: Any) -> AppState:
    goal = _coerce_text(payload)
    if not goal or goal in state.profile.goals:
        return state
    profile = state.profile.model_copy(update={"goals": state.profile.goals + (goal,)})
    return _with(state, profile=profile)


def _delete_goal(state: AppState, payload: Any) -> AppState:
    goal = _coerce_text(payload)
    goals = state.profile.goals
    if goal not in goals:
        return state
    index = goals.index(goal)
    profile = state.profile.model_copy(update={"goals": goals[:index] + goals[index + 1:]})
    return _with(state, profile=profile)


def _set_theme(state: AppState, payload: Any) -> AppState:
    theme = _coerce_text(payload)
    if theme not in ("light", "dark") or theme == state.settings.theme:
        return state
    return _with(state, settings=state.settings.model_copy(update={"theme": theme}))


def _add_focus_session(state: AppState, payload: Any) -> AppState:
    session = _coerce(FocusSession, payload)
    if session.duration < 0:
        return state
    return _with(state, focus_sessions=state.focus_sessions + (session,))


def _import_state(state: AppState, payload: Any) -> AppState:
    if isinstance(payload, AppState):
        return payload
    if not isinstance(payload, Mapping):
        raise ValueError("IMPORT_STATE expects a document mapping")
    return merge_with_defaults(payload)


_HANDLER_TABLE: Dict[ActionType, Handler] = {
    ActionType.ADD_ROUTINE: _adder("routines", Routine),
    ActionType.UPDATE_ROUTINE: _updater("routines", Routine),
    ActionType.DELETE_ROUTINE: _deleter("routines"),
    ActionType.TOGGLE_ROUTINE: _toggle_routine,
    ActionType.ADD_EVENT: _adder("events", Event),
    ActionType.UPDATE_EVENT: _updater("events", Event),
    ActionType.DELETE_EVENT: _deleter("events"),
    ActionType.TOGGLE_EVENT: _toggler("events"),
    ActionType.MOVE_EVENT_TO_TOMORROW: _move_event_to_tomorrow,
    ActionType.SET_DAY_TASKS: _set_day_tasks,
    ActionType.ADD_DAY_TASK: _add_day_task,
    ActionType.UPDATE_DAY_TASK: _update_day_task,
    ActionType.DELETE_DAY_TASK: _delete_day_task,
    ActionType.TOGGLE_DAY_TASK: _toggle_day_task,
    ActionType.ADD_WALLET: _adder("wallets", Wallet),
    ActionType.UPDATE_WALLET: _updater("wallets", Wallet),
    ActionType.DELETE_WALLET: _deleter("wallets"),
    ActionType.ADD_TRANSACTION: _add_transaction,
    ActionType.DELETE_TRANSACTION: _deleter("transactions"),
    ActionType.ADD_CATEGORY: _add_category,
    ActionType.ADD_TASK: _adder("tasks", Task),
    ActionType.UPDATE_TASK: _updater("tasks", Task),
    ActionType.DELETE_TASK: _deleter("tasks"),
    ActionType.TOGGLE_TASK: _toggler("tasks"),
    ActionType.BREAKDOWN_TASK: _breakdown_task,
    ActionType.ADD_HABIT: _adder("habits", Habit),
    ActionType.UPDATE_HABIT: _updater("habits", Habit),
    ActionType.DELETE_HABIT: _deleter("habits"),
    ActionType.TOGGLE_HABIT_RECORD: _toggle_habit_record,
    ActionType.ADD_IDEA: _adder("ideas", Idea),
    ActionType.UPDATE_IDEA: _updater("ideas", Idea),
    ActionType.DELETE_IDEA: _deleter("ideas"),
    ActionType.PROCESS_IDEA: _process_idea,
    ActionType.UPDATE_PROFILE: _update_profile,
    ActionType.ADD_GOAL: _add_goal,
    ActionType.DELETE_GOAL: _delete_goal,
    ActionType.SET_THEME: _set_theme,
    ActionType.ADD_DOCUMENT: _adder("documents", Document),
    ActionType.DELETE_DOCUMENT: _deleter("documents"),
    ActionType.ADD_FOCUS_SESSION: _add_focus_session,
    ActionType.DELETE_FOCUS_SESSION: _deleter("focus_sessions"),
    ActionType.IMPORT_STATE: _import_state,
}

# 日本語: 素の文字列でも引けるよう値で索引 / English: Keyed by value so plain strings look up too
_HANDLERS: Dict[str, Handler] = {key.value: handler for key, handler in _HANDLER_TABLE.items()}

SUPPORTED_ACTION_TYPES = frozenset(_HANDLERS)


def _split_action(action: Any) -> tuple[Any, Any]:
    if isinstance(action, Action):
        return action.type, action.payload
    if isinstance(action, Mapping):
        return action.get("type"), action.get("payload")
    return None, None


def reduce(state: AppState, action: Any) -> AppState:
    """Return the state after ``action``; rejected or unknown actions return ``state`` itself."""
    action_type, payload = _split_action(action)
    handler = _HANDLERS.get(action_type) if isinstance(action_type, str) else None
    if handler is None:
        logger.debug("Ignoring unknown action %r", action_type)
        return state
    try:
        return handler(state, payload)
    except (ValueError, TypeError) as exc:
        # 日本語: 不正なペイロードは不変条件違反と同様に無視 / English: Malformed payloads are rejected like invariant violations
        logger.warning("Rejected %s: %s", action_type, exc)
        return state


__all__ = [
    "MAX_DAY_TASKS",
    "SUPPORTED_ACTION_TYPES",
    "habit_streaks",
    "reduce",
]
