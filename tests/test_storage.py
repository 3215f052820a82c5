from __future__ import annotations

import json
from pathlib import Path

import pytest

from tao.storage import STORE_FILENAME, JsonFileStore, StoreError, default_store


def test_missing_file_reads_empty(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "store.json")
    assert store.get("tao-favorites") is None


def test_set_creates_parent_and_keeps_other_keys(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.json"
    store = JsonFileStore(path)
    store.set("first", "1")
    store.set("tao-favorites", "[3]")

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload == {"first": "1", "tao-favorites": "[3]"}
    assert not path.with_name("store.json.tmp").exists()


def test_corrupt_file_reads_empty(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("{oops", encoding="utf-8")
    store = JsonFileStore(path)
    assert store.get("tao-favorites") is None
    store.set("tao-favorites", "[1]")
    assert store.get("tao-favorites") == "[1]"


def test_non_string_values_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"tao-favorites": [1, 2]}), encoding="utf-8")
    assert JsonFileStore(path).get("tao-favorites") is None


def test_unwritable_location_raises_store_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    store = JsonFileStore(blocker / "store.json")
    with pytest.raises(StoreError):
        store.set("tao-favorites", "[]")


def test_default_store_lives_in_state_dir(tmp_path: Path) -> None:
    store = default_store(tmp_path)
    assert store.path == tmp_path / STORE_FILENAME


def test_invalid_utf8_reads_empty(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_bytes(b'{"tao-favorites": "[1]\xff"}')
    store = JsonFileStore(path)
    assert store.get("tao-favorites") is None
    store.set("tao-favorites", "[2]")
    assert store.get("tao-favorites") == "[2]"


def test_deeply_nested_file_reads_empty(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
    assert JsonFileStore(path).get("tao-favorites") is None
