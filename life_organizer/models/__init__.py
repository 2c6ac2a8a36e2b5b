"""Model exports for Life Organizer."""

from .action_models import (
    Action,
    ActionType,
    BreakdownPayload,
    DateRef,
    DayTaskPayload,
    DayTaskRef,
    DayTasksPayload,
)
from .state_models import (
    DEFAULT_CATEGORIES,
    DEFAULT_WALLETS,
    WEEKDAYS,
    AppState,
    DayTask,
    Document,
    Event,
    FocusSession,
    Habit,
    Idea,
    Profile,
    Routine,
    Settings,
    Task,
    Transaction,
    Wallet,
    default_state,
)
from .storage_models import StoredDocument

__all__ = [
    "Action",
    "ActionType",
    "BreakdownPayload",
    "DateRef",
    "DayTaskPayload",
    "DayTaskRef",
    "DayTasksPayload",
    "AppState",
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
    "WEEKDAYS",
    "DEFAULT_CATEGORIES",
    "DEFAULT_WALLETS",
    "default_state",
    "StoredDocument",
]
