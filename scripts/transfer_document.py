#!/usr/bin/env python3
"""Export, import or copy the stored Life Organizer document."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from sqlmodel import Session

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from life_organizer.core.config import configure_logging, get_storage_key  # noqa: E402
from life_organizer.core.db import _build_engine, _ensure_sqlite_directory, _normalize_database_url  # noqa: E402
from life_organizer.core.migrations import upgrade_to_head  # noqa: E402
from life_organizer.services.persistence_service import (  # noqa: E402
    UNREADABLE_ERRORS,
    SqlDocumentStorage,
    export_document,
    parse_document,
    save_state,
)


def _storage_for(database_url: str) -> SqlDocumentStorage:
    normalized_url = _normalize_database_url(database_url)
    _ensure_sqlite_directory(normalized_url)
    upgrade_to_head(normalized_url)
    engine = _build_engine(normalized_url)
    return SqlDocumentStorage(lambda: Session(engine))


def _export(args: argparse.Namespace) -> int:
    storage = _storage_for(args.database_url)
    blob = storage.read(args.key)
    if blob is None:
        print(f"No stored document under '{args.key}'.", file=sys.stderr)
        return 1
    try:
        state = parse_document(blob)
    except UNREADABLE_ERRORS as exc:
        # 日本語: 壊れた文書は既定値で置き換えず失敗させる / English: An unreadable document fails the export instead of exporting defaults
        print(f"Stored document '{args.key}' is unreadable: {exc}", file=sys.stderr)
        return 1
    # 日本語: 既定値とマージ済みの文書を出力（未知キーもそのまま） / English: Write the default-merged document, unknown keys included
    document = export_document(state)
    Path(args.file).write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"Exported '{args.key}' to {args.file}.")
    return 0


def _import(args: argparse.Namespace) -> int:
    source = Path(args.file)
    if not source.exists():
        print(f"File not found: {source}", file=sys.stderr)
        return 1
    try:
        state = parse_document(source.read_text(encoding="utf-8"))
    except UNREADABLE_ERRORS as exc:
        print(f"Refusing to import {source}: {exc}", file=sys.stderr)
        return 1

    storage = _storage_for(args.database_url)
    if storage.read(args.key) is not None and not args.force:
        print("Target already holds a document. Use --force to overwrite.", file=sys.stderr)
        return 1
    save_state(storage, args.key, state)
    print(f"Imported {source} into '{args.key}'.")
    return 0


def _copy(args: argparse.Namespace) -> int:
    source = _storage_for(args.database_url)
    target = _storage_for(args.target_url)
    blob = source.read(args.key)
    if blob is None:
        print(f"No stored document under '{args.key}'.", file=sys.stderr)
        return 1
    if target.read(args.key) is not None and not args.force:
        print("Target already holds a document. Use --force to overwrite.", file=sys.stderr)
        return 1
    # 日本語: 生データをそのまま複製し、解釈による欠落を避ける / English: Copy the raw blob so nothing is lost to re-interpretation
    target.write(args.key, blob)
    print("Copy completed successfully.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Transfer the stored Life Organizer document")
    parser.add_argument(
        "--database-url",
        default=os.environ.get("DATABASE_URL", f"sqlite:///{ROOT / 'instance' / 'life_organizer.db'}"),
        help="Source database URL",
    )
    parser.add_argument("--key", default=get_storage_key(), help="Storage key of the document")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing target document")
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Write the document to a JSON file")
    export_parser.add_argument("file")
    export_parser.set_defaults(handler=_export)

    import_parser = subparsers.add_parser("import", help="Store a document read from a JSON file")
    import_parser.add_argument("file")
    import_parser.set_defaults(handler=_import)

    copy_parser = subparsers.add_parser("copy", help="Copy the document to another database")
    copy_parser.add_argument("target_url")
    copy_parser.set_defaults(handler=_copy)

    args = parser.parse_args(argv)
    configure_logging()
    return args.handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
