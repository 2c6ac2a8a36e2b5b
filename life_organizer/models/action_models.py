"""Action vocabulary accepted by the reducer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple

from pydantic import ConfigDict

from life_organizer.models.state_models import DateStr, DayTask, StateModel, Task


class ActionType(str, Enum):
    # 日本語: ルーチン / English: Routines
    ADD_ROUTINE = "ADD_ROUTINE"
    UPDATE_ROUTINE = "UPDATE_ROUTINE"
    DELETE_ROUTINE = "DELETE_ROUTINE"
    TOGGLE_ROUTINE = "TOGGLE_ROUTINE"

    # 日本語: イベント / English: Events
    ADD_EVENT = "ADD_EVENT"
    UPDATE_EVENT = "UPDATE_EVENT"
    DELETE_EVENT = "DELETE_EVENT"
    TOGGLE_EVENT = "TOGGLE_EVENT"
    MOVE_EVENT_TO_TOMORROW = "MOVE_EVENT_TO_TOMORROW"

    # 日本語: 1日の重点タスク / English: Key tasks of a day
    SET_DAY_TASKS = "SET_DAY_TASKS"
    ADD_DAY_TASK = "ADD_DAY_TASK"
    UPDATE_DAY_TASK = "UPDATE_DAY_TASK"
    DELETE_DAY_TASK = "DELETE_DAY_TASK"
    TOGGLE_DAY_TASK = "TOGGLE_DAY_TASK"

    # 日本語: 家計 / English: Finance
    ADD_WALLET = "ADD_WALLET"
    UPDATE_WALLET = "UPDATE_WALLET"
    DELETE_WALLET = "DELETE_WALLET"
    ADD_TRANSACTION = "ADD_TRANSACTION"
    DELETE_TRANSACTION = "DELETE_TRANSACTION"
    ADD_CATEGORY = "ADD_CATEGORY"

    # 日本語: やること / English: To-do
    ADD_TASK = "ADD_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    DELETE_TASK = "DELETE_TASK"
    TOGGLE_TASK = "TOGGLE_TASK"
    BREAKDOWN_TASK = "BREAKDOWN_TASK"

    # 日本語: 習慣 / English: Habits
    ADD_HABIT = "ADD_HABIT"
    UPDATE_HABIT = "UPDATE_HABIT"
    DELETE_HABIT = "DELETE_HABIT"
    TOGGLE_HABIT_RECORD = "TOGGLE_HABIT_RECORD"

    # 日本語: アイデア受信箱 / English: Idea inbox
    ADD_IDEA = "ADD_IDEA"
    UPDATE_IDEA = "UPDATE_IDEA"
    DELETE_IDEA = "DELETE_IDEA"
    PROCESS_IDEA = "PROCESS_IDEA"

    # 日本語: プロフィールと設定 / English: Profile and settings
    UPDATE_PROFILE = "UPDATE_PROFILE"
    ADD_GOAL = "ADD_GOAL"
    DELETE_GOAL = "DELETE_GOAL"
    SET_THEME = "SET_THEME"

    ADD_DOCUMENT = "ADD_DOCUMENT"
    DELETE_DOCUMENT = "DELETE_DOCUMENT"

    ADD_FOCUS_SESSION = "ADD_FOCUS_SESSION"
    DELETE_FOCUS_SESSION = "DELETE_FOCUS_SESSION"

    # 日本語: ドキュメント全体の取り込み / English: Whole-document import
    IMPORT_STATE = "IMPORT_STATE"


@dataclass(frozen=True)
class Action:
    """A named, self-contained request to transition the state."""

    type: str
    payload: Any = None


class _Payload(StateModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class DateRef(_Payload):
    """Entity id plus the calendar date the operation applies to."""

    id: str
    date: DateStr


class DayTaskRef(_Payload):
    date: DateStr
    task_id: str


class DayTaskPayload(_Payload):
    date: DateStr
    task: DayTask


class DayTasksPayload(_Payload):
    date: DateStr
    tasks: Tuple[DayTask, ...] = ()


class BreakdownPayload(_Payload):
    parent_id: str
    subtasks: Tuple[Task, ...] = ()


__all__ = [
    "ActionType",
    "Action",
    "DateRef",
    "DayTaskRef",
    "DayTaskPayload",
    "DayTasksPayload",
    "BreakdownPayload",
]
