"""Life organizer domain models."""

from __future__ import annotations

import datetime
from typing import Annotated, Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

Weekday = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
WEEKDAYS: Tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

WalletType = Literal["cash", "card"]
TransactionType = Literal["income", "expense"]
TaskPriority = Literal["normal", "important"]
TaskTimeEstimate = Literal[5, 15, 30, 60]
IdeaStatus = Literal["active", "processed"]
Theme = Literal["light", "dark"]


def _coerce_date_text(value: Any) -> Any:
    # 日本語: date/datetime は ISO 文字列として保持 / English: Keep date and datetime values as ISO strings
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value


DateStr = Annotated[str, BeforeValidator(_coerce_date_text)]


class StateModel(BaseModel):
    """Immutable base for every entity stored in the document."""

    model_config = ConfigDict(frozen=True, extra="ignore")


# 日本語: 曜日ごとに繰り返すルーチン / English: Routine repeated on tagged weekdays
class Routine(StateModel):
    id: str
    title: str
    # 日本語: "09:00" または "09:00-10:00" / English: "09:00" or a range such as "09:00-10:00"
    time: Optional[str] = None
    days: Tuple[Weekday, ...] = ()
    icon: Optional[str] = None
    # 日本語: 日付 -> 完了フラグ（未記録は未完了） / English: Date -> done flag, absence means not done
    completed: Dict[str, bool] = {}


# 日本語: 特定日の単発イベント / English: One-shot event bound to a single date
class Event(StateModel):
    id: str
    title: str
    date: DateStr
    time: Optional[str] = None
    icon: Optional[str] = None
    completed: bool = False


# 日本語: 1日最大3件の重点タスク / English: One of at most three key tasks of a day
class DayTask(StateModel):
    id: str
    title: str
    completed: bool = False
    date: DateStr


class Wallet(StateModel):
    id: str
    type: WalletType
    name: str
    balance: float = Field(0.0, allow_inf_nan=False)


class Transaction(StateModel):
    id: str
    type: TransactionType
    # 日本語: 常に正の値。符号は type で表す / English: Always positive, the sign comes from type
    amount: float = Field(allow_inf_nan=False)
    date: DateStr
    wallet_id: str
    category: str
    comment: Optional[str] = None
    created_at: Optional[str] = None


# 日本語: parent_id で木構造を表すフラットなタスク / English: Flat task list, parent_id turns it into a tree
class Task(StateModel):
    id: str
    title: str
    completed: bool = False
    # 日本語: 未設定は「いつか」バケット / English: No date means the "someday" bucket
    date: Optional[DateStr] = None
    priority: TaskPriority = "normal"
    time_estimate: Optional[TaskTimeEstimate] = None
    parent_id: Optional[str] = None
    created_at: Optional[str] = None
    completed_at: Optional[str] = None


class Habit(StateModel):
    id: str
    title: str
    description: Optional[str] = None
    icon: str = "book"
    color: str = "#2f04fd"
    records: Tuple[str, ...] = ()
    streak: int = 0
    best_streak: int = 0
    created_at: str = ""

    @field_validator("records", mode="before")
    @classmethod
    def _unique_sorted_records(cls, value: Any) -> Any:
        # 日本語: 重複日付を除去し昇順で保持 / English: Drop duplicate dates and keep them ascending
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(sorted({_coerce_date_text(item) for item in value}))
        return value


class Idea(StateModel):
    id: str
    text: str
    created_at: str = ""
    status: IdeaStatus = "active"


class Profile(StateModel):
    name: str = ""
    bio: Optional[str] = ""
    goals: Tuple[str, ...] = ()
    avatar: Optional[str] = None


class Document(StateModel):
    id: str
    name: str
    image_base64: Optional[str] = None


# 日本語: タスク削除後も残るようタイトルを複製保持 / English: Title is copied so it outlives the referenced task
class FocusSession(StateModel):
    id: str
    task_id: str
    task_title: str
    duration: int = 0
    date: DateStr
    completed: bool = False


class Settings(StateModel):
    theme: Theme = "light"


DEFAULT_CATEGORIES: Tuple[str, ...] = (
    "Food",
    "Transport",
    "Entertainment",
    "Health",
    "Clothes",
    "Subscriptions",
    "Salary",
    "Gifts",
    "Other",
)

DEFAULT_WALLETS: Tuple[Wallet, ...] = (
    Wallet(id="wallet-cash", type="cash", name="Cash", balance=0.0),
    Wallet(id="wallet-card", type="card", name="Card", balance=0.0),
)

# 日本語: 1日に持てる重点タスクの上限 / English: Upper bound of key tasks per date
MAX_DAY_TASKS = 3


# 日本語: 全コレクションを束ねるルートドキュメント / English: Root document aggregating every collection
class AppState(StateModel):
    # 日本語: 未知のトップレベルキーは保持して往復させる / English: Unknown top-level keys are kept for round trips
    model_config = ConfigDict(frozen=True, extra="allow")

    routines: Tuple[Routine, ...] = ()
    events: Tuple[Event, ...] = ()
    day_tasks: Dict[str, Tuple[DayTask, ...]] = {}
    wallets: Tuple[Wallet, ...] = DEFAULT_WALLETS
    transactions: Tuple[Transaction, ...] = ()
    categories: Tuple[str, ...] = DEFAULT_CATEGORIES
    tasks: Tuple[Task, ...] = ()
    habits: Tuple[Habit, ...] = ()
    ideas: Tuple[Idea, ...] = ()
    profile: Profile = Profile()
    documents: Tuple[Document, ...] = ()
    focus_sessions: Tuple[FocusSession, ...] = ()
    settings: Settings = Settings()

    @field_validator("day_tasks")
    @classmethod
    def _cap_day_tasks(cls, value: Dict[str, Tuple[DayTask, ...]]) -> Dict[str, Tuple[DayTask, ...]]:
        for day, tasks in value.items():
            if len(tasks) > MAX_DAY_TASKS:
                raise ValueError(f"{day} holds {len(tasks)} key tasks, at most {MAX_DAY_TASKS} allowed")
        return value


def default_state() -> AppState:
    """Built-in document used on first start and whenever loading fails."""
    return AppState()


__all__ = [
    "WEEKDAYS",
    "Weekday",
    "StateModel",
    "Routine",
    "Event",
    "DayTask",
    "Wallet",
    "Transaction",
    "Task",
    "Habit",
    "Idea",
    "Profile",
    "Document",
    "FocusSession",
    "Settings",
    "AppState",
    "DEFAULT_CATEGORIES",
    "DEFAULT_WALLETS",
    "MAX_DAY_TASKS",
    "default_state",
]
