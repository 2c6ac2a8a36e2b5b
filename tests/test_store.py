import json
import threading

from conftest import MONDAY, FailingStorage, MemoryStorage, act
from life_organizer.models import Event, Routine, Transaction
from life_organizer.services.persistence_service import DebouncedWriter, deserialize
from life_organizer.services.sample_data_service import seed_sample_data
from life_organizer.services.store_service import Store

KEY = "life-organizer-data"


def test_dispatch_replaces_state_and_notifies_listeners(store):
    seen = []
    store.subscribe(lambda previous, current: seen.append((previous, current)))
    before = store.state

    after = store.dispatch(act("ADD_EVENT", Event(id="e1", title="Dentist", date="2024-05-13", time="15:00")))

    assert store.state is after
    assert before.events == ()
    assert seen == [(before, after)]


def test_rejected_action_triggers_nothing(memory_storage):
    writer = DebouncedWriter(memory_storage, KEY, delay=0)
    store = Store(writer=writer, clock=lambda: MONDAY)
    calls = []
    store.subscribe(lambda previous, current: calls.append(current))
    before = store.state

    assert store.dispatch(act("ADD_CATEGORY", "Food")) is before
    assert store.dispatch({"type": "NOT_AN_ACTION"}) is before
    assert calls == []
    assert memory_storage.writes == []


def test_unsubscribe_and_failing_listener(store):
    calls = []

    def broken(previous, current):
        raise RuntimeError("listener bug")

    store.subscribe(broken)
    unsubscribe = store.subscribe(lambda previous, current: calls.append(current))

    store.dispatch(act("ADD_CATEGORY", "Books"))
    assert len(calls) == 1
    assert store.state.categories[-1] == "Books"

    unsubscribe()
    store.dispatch(act("ADD_CATEGORY", "Games"))
    assert len(calls) == 1


def test_views_are_memoized_per_snapshot(store):
    store.dispatch(act("ADD_ROUTINE", Routine(id="r1", title="Gym", time="08:00", days=("mon",))))

    first = store.schedule_for()
    assert store.schedule_for(MONDAY) is first
    assert [item["id"] for item in first] == ["r1"]

    store.dispatch(act("ADD_EVENT", Event(id="e1", title="Standup", date="2024-05-13", time="07:00")))
    second = store.schedule_for()
    assert second is not first
    assert [item["id"] for item in second] == ["e1", "r1"]


def test_store_views_use_clock_for_today(store):
    store.dispatch(
        act(
            "ADD_TRANSACTION",
            Transaction(id="t1", type="expense", amount=42, date="2024-05-10", wallet_id="wallet-cash", category="Food"),
        )
    )
    store.dispatch(act("TOGGLE_ROUTINE", {"id": "missing", "date": "2024-05-13"}))
    store.dispatch(
        act("ADD_FOCUS_SESSION", {"id": "f1", "task_id": "t", "task_title": "Write", "duration": 3900, "date": "2024-05-14"})
    )

    assert store.today() == "2024-05-13"
    assert store.weekly_expenses() == 42
    assert store.monthly_expenses() == 42
    assert store.top_categories() == [("Food", 42)]
    assert store.focus_week_label() == "1 h 5 min"
    assert store.completion_rate() == 0
    assert store.habit_adherence() == 0
    assert store.wallet_balances() == {"total": 0.0, "cash": 0.0, "card": 0.0}
    assert store.task_stats() == {"completed": 0, "total": 0, "percent": 0}
    assert store.week_occupancy()["2024-05-13"] is False
    assert store.occupancy(["2024-05-14"]) == {"2024-05-14": False}


def test_open_restores_and_persists(memory_storage):
    first = Store.open(memory_storage, key=KEY, delay=0, clock=lambda: MONDAY)
    first.dispatch(act("ADD_CATEGORY", "Books"))
    first.dispatch(act("SET_THEME", "dark"))
    first.close()

    assert json.loads(memory_storage.blobs[KEY])["settings"]["theme"] == "dark"

    second = Store.open(memory_storage, key=KEY, delay=0)
    assert second.state == first.state


def test_open_with_corrupt_storage_starts_from_defaults():
    storage = MemoryStorage({KEY: "\x00garbage"})
    store = Store.open(storage, key=KEY, delay=30)
    assert store.state.routines == ()
    assert storage.blobs[KEY + ".corrupt"] == "\x00garbage"


def test_failed_saves_do_not_affect_state():
    storage = FailingStorage()
    store = Store.open(storage, key=KEY, delay=0, clock=lambda: MONDAY)

    state = store.dispatch(act("ADD_CATEGORY", "Books"))
    assert store.state is state
    assert storage.attempts == 1
    assert store.flush() is False
    assert store.state.categories[-1] == "Books"


def test_debounced_store_writes_latest_snapshot_once(memory_storage):
    store = Store.open(memory_storage, key=KEY, delay=30, clock=lambda: MONDAY)
    for name in ("Books", "Games", "Garden"):
        store.dispatch(act("ADD_CATEGORY", name))

    assert memory_storage.writes == []
    assert store.flush() is True
    assert len(memory_storage.writes) == 1
    assert deserialize(memory_storage.blobs[KEY]) == store.state


def test_seed_sample_data_is_idempotent(store):
    messages = seed_sample_data(store, today=MONDAY)
    assert messages

    state = store.state
    assert {routine.id for routine in state.routines} == {"sample-routine-morning", "sample-routine-reading"}
    assert len(state.day_tasks["2024-05-13"]) == 3
    assert [task.parent_id for task in state.tasks] == [None, "sample-task-move", "sample-task-move"]
    assert state.habits[0].streak == 3
    assert store.focus_week_label() == "25 min"
    assert store.monthly_expenses() == 1650
    assert [item["id"] for item in store.schedule_for()] == [
        "sample-routine-morning",
        "sample-event-dentist",
        "sample-routine-reading",
    ]

    assert seed_sample_data(store, today=MONDAY) == []
    assert store.state is state


class _GatedWriter(DebouncedWriter):
    """Holds the first scheduled snapshot until ``release`` is set."""

    def __init__(self, storage):
        super().__init__(storage, KEY, delay=30)
        self.entered = threading.Event()
        self.release = threading.Event()
        self.scheduled = []

    def schedule(self, state):
        if not self.entered.is_set():
            self.entered.set()
            self.release.wait(5)
        self.scheduled.append(state)
        super().schedule(state)


def test_concurrent_dispatches_persist_and_notify_in_order(memory_storage):
    writer = _GatedWriter(memory_storage)
    store = Store(writer=writer, clock=lambda: MONDAY)
    seen = []
    store.subscribe(lambda previous, current: seen.append(current.categories[-1]))

    first = threading.Thread(target=store.dispatch, args=(act("ADD_CATEGORY", "First"),))
    second = threading.Thread(target=store.dispatch, args=(act("ADD_CATEGORY", "Second"),))
    first.start()
    assert writer.entered.wait(5)
    second.start()
    second.join(0.2)
    writer.release.set()
    first.join(5)
    second.join(5)

    assert store.state.categories[-2:] == ("First", "Second")
    assert [state.categories[-1] for state in writer.scheduled] == ["First", "Second"]
    assert seen == ["First", "Second"]
    assert writer.flush() is True
    assert deserialize(memory_storage.blobs[KEY]) == store.state
