import importlib
import json

import pytest

from conftest import act
from life_organizer.models import default_state
from life_organizer.services.persistence_service import CORRUPT_SUFFIX, deserialize, save_state
from life_organizer.services.reducer_service import reduce

KEY = "life-organizer-data"


@pytest.fixture()
def transfer():
    return importlib.import_module("scripts.transfer_document")


@pytest.fixture()
def source_url(tmp_path):
    return f"sqlite:///{tmp_path / 'source' / 'life.db'}"


@pytest.fixture()
def target_url(tmp_path):
    return f"sqlite:///{tmp_path / 'target' / 'life.db'}"


def _run(transfer, database_url, *args):
    return transfer.main(["--database-url", database_url, "--key", KEY, *args])


def test_export_writes_merged_document(transfer, source_url, tmp_path):
    state = reduce(default_state(), act("SET_THEME", "dark"))
    save_state(transfer._storage_for(source_url), KEY, state)
    output = tmp_path / "export.json"

    assert _run(transfer, source_url, "export", str(output)) == 0
    document = json.loads(output.read_text(encoding="utf-8"))
    assert document["settings"] == {"theme": "dark"}
    assert document["categories"] == list(default_state().categories)


def test_export_without_document_fails(transfer, source_url, tmp_path):
    output = tmp_path / "export.json"
    assert _run(transfer, source_url, "export", str(output)) == 1
    assert not output.exists()


def test_export_of_unreadable_document_fails_without_side_effects(transfer, source_url, tmp_path, capsys):
    storage = transfer._storage_for(source_url)
    storage.write(KEY, "{broken")
    output = tmp_path / "export.json"

    assert _run(transfer, source_url, "export", str(output)) == 1
    assert "unreadable" in capsys.readouterr().err
    assert not output.exists()
    assert storage.read(KEY) == "{broken"
    assert storage.read(KEY + CORRUPT_SUFFIX) is None


def test_import_requires_force_to_overwrite(transfer, target_url, tmp_path):
    first = tmp_path / "first.json"
    first.write_text(json.dumps({"categories": ["Books"]}), encoding="utf-8")
    second = tmp_path / "second.json"
    second.write_text(json.dumps({"categories": ["Games"], "widgets": [1]}), encoding="utf-8")

    assert _run(transfer, target_url, "import", str(first)) == 0
    assert _run(transfer, target_url, "import", str(second)) == 1
    storage = transfer._storage_for(target_url)
    assert deserialize(storage.read(KEY)).categories == ("Books",)

    assert _run(transfer, target_url, "--force", "import", str(second)) == 0
    restored = deserialize(storage.read(KEY))
    assert restored.categories == ("Games",)
    assert restored.model_extra == {"widgets": [1]}


def test_import_rejects_invalid_files(transfer, target_url, tmp_path):
    missing = tmp_path / "missing.json"
    assert _run(transfer, target_url, "import", str(missing)) == 1

    not_object = tmp_path / "list.json"
    not_object.write_text("[1, 2]", encoding="utf-8")
    assert _run(transfer, target_url, "import", str(not_object)) == 1

    over_cap = tmp_path / "over_cap.json"
    tasks = [{"id": f"d{index}", "title": "Task", "date": "2024-05-13"} for index in range(4)]
    over_cap.write_text(json.dumps({"day_tasks": {"2024-05-13": tasks}}), encoding="utf-8")
    assert _run(transfer, target_url, "import", str(over_cap)) == 1

    assert transfer._storage_for(target_url).read(KEY) is None


def test_copy_transfers_raw_blob(transfer, source_url, target_url):
    blob = json.dumps({"categories": ["Books"], "future_field": {"kept": True}})
    transfer._storage_for(source_url).write(KEY, blob)

    assert _run(transfer, source_url, "copy", target_url) == 0
    target = transfer._storage_for(target_url)
    assert target.read(KEY) == blob

    transfer._storage_for(source_url).write(KEY, "{}")
    assert _run(transfer, source_url, "copy", target_url) == 1
    assert target.read(KEY) == blob


def test_storage_for_normalizes_legacy_postgres_scheme(transfer, monkeypatch):
    seen = []
    monkeypatch.setattr(transfer, "upgrade_to_head", seen.append)
    monkeypatch.setattr(transfer, "_build_engine", lambda url: seen.append(url) or object())

    transfer._storage_for("postgres://user:secret@db/life")
    assert seen == ["postgresql+psycopg2://user:secret@db/life"] * 2
