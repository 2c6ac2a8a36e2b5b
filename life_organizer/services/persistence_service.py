"""Durable mirror of the state document."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Protocol

from sqlmodel import Session, select

from life_organizer.models import AppState, StoredDocument, default_state
from life_organizer.models.storage_models import utc_now

logger = logging.getLogger(__name__)

# 日本語: 読めなかった保存データを退避するキーの接尾辞 / English: Suffix of the key receiving an unreadable stored blob
CORRUPT_SUFFIX = ".corrupt"

# 日本語: 深い入れ子の JSON は RecursionError になる / English: Deeply nested JSON raises RecursionError while decoding
UNREADABLE_ERRORS = (ValueError, RecursionError)


class DocumentStorage(Protocol):
    def read(self, key: str) -> str | None: ...

    def write(self, key: str, blob: str) -> None: ...


def export_document(state: AppState) -> Dict[str, Any]:
    """JSON-ready dict of the whole document, unknown top-level keys included."""
    return state.model_dump(mode="json")


def serialize(state: AppState) -> str:
    return json.dumps(export_document(state), ensure_ascii=False)


def merge_with_defaults(document: Mapping[str, Any]) -> AppState:
    """Shallow-merge ``document`` over the default document and validate it.

    Keys missing from ``document`` (or stored as null) keep their default
    value; unknown keys are carried along untouched. Raises
    ``pydantic.ValidationError`` when a known key holds an invalid value.
    """
    merged = export_document(default_state())
    for key, value in document.items():
        if value is None and key in merged:
            continue
        merged[key] = value
    return AppState.model_validate(merged)


def import_document(document: Mapping[str, Any]) -> AppState:
    return merge_with_defaults(document)


def parse_document(blob: str | bytes) -> AppState:
    """Strict parse of a stored blob. Raises ``ValueError`` or ``RecursionError`` when unreadable."""
    document = json.loads(blob)
    if not isinstance(document, dict):
        raise ValueError(f"stored document must be an object, got {type(document).__name__}")
    return merge_with_defaults(document)


def deserialize(blob: str | bytes | None) -> AppState:
    """Parse a stored blob; anything unreadable yields the default document."""
    if blob is None:
        return default_state()
    try:
        return parse_document(blob)
    except UNREADABLE_ERRORS as exc:
        # 日本語: 破損データは部分適用せず既定値へ丸ごと戻す / English: Never apply a corrupt document partially
        logger.warning("Stored document is unreadable, using defaults: %s", exc)
        return default_state()


def _preserve_unreadable(storage: DocumentStorage, key: str, blob: str) -> None:
    # 日本語: 次回保存で上書きされる前に元データを退避 / English: Keep the raw blob before the next save overwrites it
    try:
        storage.write(key + CORRUPT_SUFFIX, blob)
    except Exception:
        logger.exception("Could not preserve unreadable document under %s", key + CORRUPT_SUFFIX)


def load_state(storage: DocumentStorage, key: str) -> AppState:
    """Restore the persisted document. Never raises."""
    try:
        blob = storage.read(key)
    except Exception:
        logger.exception("Reading stored document %s failed, using defaults", key)
        return default_state()
    if blob is None:
        logger.info("No stored document under %s, starting from defaults", key)
        return default_state()

    try:
        return parse_document(blob)
    except UNREADABLE_ERRORS as exc:
        logger.warning("Stored document %s is unreadable, using defaults: %s", key, exc)
        _preserve_unreadable(storage, key, blob)
        return default_state()


def save_state(storage: DocumentStorage, key: str, state: AppState) -> None:
    storage.write(key, serialize(state))


class FileDocumentStorage:
    """One JSON file per key inside ``directory``."""

    def __init__(self, directory: str | os.PathLike):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, blob: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_name(path.name + ".tmp")
        # 日本語: 一時ファイルに書いてから置き換え、途中書き込みを残さない / English: Write then replace so a torn file never remains
        tmp_path.write_text(blob, encoding="utf-8")
        os.replace(tmp_path, path)


class SqlDocumentStorage:
    """Stores each key as one row of the ``stored_document`` table."""

    def __init__(self, session_factory: Callable[[], Session] | None = None):
        if session_factory is None:
            from life_organizer.core.db import create_session

            session_factory = create_session
        self._session_factory = session_factory

    def read(self, key: str) -> str | None:
        with self._session_factory() as db:
            row = db.exec(select(StoredDocument).where(StoredDocument.key == key)).first()
            return row.payload if row else None

    def write(self, key: str, blob: str) -> None:
        with self._session_factory() as db:
            row = db.get(StoredDocument, key)
            if row is None:
                row = StoredDocument(key=key, payload=blob)
            else:
                row.payload = blob
                row.updated_at = utc_now()
            db.add(row)
            db.commit()


class DebouncedWriter:
    """Coalesces bursts of saves into one write of the latest snapshot."""

    def __init__(self, storage: DocumentStorage, key: str, delay: float = 0.5):
        self.storage = storage
        self.key = key
        self.delay = delay
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._pending: AppState | None = None
        self._timer: threading.Timer | None = None
        self._closed = False
        self.write_count = 0

    def schedule(self, state: AppState) -> None:
        with self._lock:
            if self._closed:
                logger.warning("Save requested after writer was closed; ignored")
                return
            self._pending = state
            if self._timer is not None:
                self._timer.cancel()
            if self.delay <= 0:
                self._timer = None
            else:
                self._timer = threading.Timer(self.delay, self.flush)
                self._timer.daemon = True
                self._timer.start()
        if self.delay <= 0:
            self.flush()

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def flush(self) -> bool:
        """Write the pending snapshot now. Returns True when a write succeeded."""
        with self._write_lock:
            with self._lock:
                state = self._pending
                self._pending = None
                if self._timer is not None:
                    self._timer.cancel()
                    self._timer = None
            if state is None:
                return False
            try:
                save_state(self.storage, self.key, state)
            except Exception:
                # 日本語: 保存失敗はメモリ上の状態に影響させない / English: A failed save never touches in-memory state
                logger.exception("Saving document %s failed", self.key)
                with self._lock:
                    # 日本語: 新しい保存要求がなければ次回に再試行 / English: Retry on the next flush unless a newer snapshot arrived
                    if self._pending is None:
                        self._pending = state
                return False
            self.write_count += 1
            logger.debug("Saved document %s (write #%d)", self.key, self.write_count)
            return True

    def close(self) -> None:
        self.flush()
        with self._lock:
            self._closed = True


__all__ = [
    "CORRUPT_SUFFIX",
    "UNREADABLE_ERRORS",
    "DocumentStorage",
    "DebouncedWriter",
    "FileDocumentStorage",
    "SqlDocumentStorage",
    "deserialize",
    "export_document",
    "import_document",
    "load_state",
    "merge_with_defaults",
    "parse_document",
    "save_state",
    "serialize",
]
