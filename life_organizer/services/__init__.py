"""Service-layer exports."""

from .persistence_service import (
    DebouncedWriter,
    FileDocumentStorage,
    SqlDocumentStorage,
    deserialize,
    export_document,
    import_document,
    load_state,
    save_state,
    serialize,
)
from .reducer_service import MAX_DAY_TASKS, SUPPORTED_ACTION_TYPES, habit_streaks, reduce
from .sample_data_service import seed_sample_data
from .schedule_service import daily_schedule, occupancy_map, week_occupancy
from .stats_service import (
    focus_week_seconds,
    format_focus_time,
    habit_week_adherence,
    monthly_expenses,
    top_categories,
    weekly_expenses,
)
from .store_service import Store

__all__ = [
    "DebouncedWriter",
    "FileDocumentStorage",
    "SqlDocumentStorage",
    "deserialize",
    "export_document",
    "import_document",
    "load_state",
    "save_state",
    "serialize",
    "MAX_DAY_TASKS",
    "SUPPORTED_ACTION_TYPES",
    "habit_streaks",
    "reduce",
    "seed_sample_data",
    "daily_schedule",
    "occupancy_map",
    "week_occupancy",
    "focus_week_seconds",
    "format_focus_time",
    "habit_week_adherence",
    "monthly_expenses",
    "top_categories",
    "weekly_expenses",
    "Store",
]
