import datetime
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from life_organizer.models import Action, ActionType, AppState  # noqa: E402
from life_organizer.services.store_service import Store  # noqa: E402

# 2024-05-13 is a Monday.
MONDAY = datetime.date(2024, 5, 13)


class MemoryStorage:
    def __init__(self, blobs=None):
        self.blobs = dict(blobs or {})
        self.writes = []

    def read(self, key):
        return self.blobs.get(key)

    def write(self, key, blob):
        self.writes.append((key, blob))
        self.blobs[key] = blob


class FailingStorage(MemoryStorage):
    def __init__(self, blobs=None, fail_reads=False):
        super().__init__(blobs)
        self.fail_reads = fail_reads
        self.attempts = 0

    def read(self, key):
        if self.fail_reads:
            raise OSError("storage unavailable")
        return super().read(key)

    def write(self, key, blob):
        self.attempts += 1
        raise OSError("disk full")


def act(action_type, payload=None):
    return Action(ActionType(action_type), payload)


@pytest.fixture()
def memory_storage():
    return MemoryStorage()


@pytest.fixture()
def empty_state():
    return AppState()


@pytest.fixture()
def store():
    return Store(clock=lambda: MONDAY)
