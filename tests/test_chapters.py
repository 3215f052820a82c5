from __future__ import annotations

import json
from pathlib import Path

import pytest
import requests

import tao.chapters as chapters_mod
from tao.chapters import ChapterStore, LoadError, parse_chapters


def test_load_from_file_keeps_source_order(source_file: Path) -> None:
    store = ChapterStore()
    assert not store.loaded
    assert store.get(1) is None

    chapters = store.load(source_file)

    assert store.loaded
    assert len(store) == 81
    assert [ch.ordinal for ch in chapters] == list(range(1, 82))
    first = store.get(1)
    assert first is not None
    assert first.title == "Tao"
    assert first.original_text == "道可道，非常道。"
    assert first.keywords == ("Way", "naming", "mystery")
    assert store.get(82) is None


def test_load_preserves_unsorted_document_order(tmp_path: Path, full_payload) -> None:
    reordered = list(reversed(full_payload))
    path = tmp_path / "reversed.json"
    path.write_text(json.dumps(reordered), encoding="utf-8")

    store = ChapterStore()
    store.load(path)

    assert store.ordinals()[:3] == [81, 80, 79]


def test_missing_file_leaves_store_unloaded(tmp_path: Path) -> None:
    store = ChapterStore()
    with pytest.raises(LoadError):
        store.load(tmp_path / "missing.json")
    assert not store.loaded
    assert store.chapters == ()


def test_invalid_json_is_load_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("[{not json", encoding="utf-8")
    store = ChapterStore()
    with pytest.raises(LoadError):
        store.load(path)
    assert not store.loaded


@pytest.mark.parametrize(
    "raw",
    [
        pytest.param("[" * 100000 + "]" * 100000, id="deeply-nested"),
        pytest.param("[" + "9" * 5000 + "]", id="oversized-integer"),
    ],
)
def test_undecodable_json_is_load_error(tmp_path: Path, raw: str) -> None:
    path = tmp_path / "hostile.json"
    path.write_text(raw, encoding="utf-8")
    store = ChapterStore()
    with pytest.raises(LoadError):
        store.load(path)
    assert not store.loaded


@pytest.mark.parametrize(
    "mutate",
    [
        lambda entry: entry.pop("title"),
        lambda entry: entry.update(chapter_number="1"),
        lambda entry: entry.update(chapter_number=True),
        lambda entry: entry.update(chapter_number=0),
        lambda entry: entry.update(chapter_number=82),
        lambda entry: entry.update(keywords="Way"),
        lambda entry: entry.update(keywords=["Way", 3]),
        lambda entry: entry.update(modern_translation=None),
    ],
)
def test_malformed_entries_are_rejected(full_payload, mutate) -> None:
    mutate(full_payload[0])
    with pytest.raises(LoadError):
        parse_chapters(full_payload)


def test_non_array_payload_is_rejected() -> None:
    with pytest.raises(LoadError):
        parse_chapters({"chapters": []})


def test_duplicate_ordinals_are_rejected(full_payload) -> None:
    full_payload[1]["chapter_number"] = 1
    with pytest.raises(LoadError) as excinfo:
        parse_chapters(full_payload)
    assert "Duplicate" in str(excinfo.value)


def test_store_is_populated_only_once(source_file: Path) -> None:
    store = ChapterStore()
    store.load(source_file)
    with pytest.raises(LoadError):
        store.load(source_file)
    assert len(store) == 81


def test_load_from_url_uses_requests(monkeypatch, full_payload) -> None:
    calls: dict[str, object] = {}

    class _Response:
        encoding = "utf-8"
        text = json.dumps(full_payload)

        def raise_for_status(self) -> None:
            return None

    def _fake_get(url, timeout):
        calls["url"] = url
        calls["timeout"] = timeout
        return _Response()

    monkeypatch.setattr(chapters_mod.requests, "get", _fake_get)

    store = ChapterStore()
    store.load("https://example.com/data/tao_te_ching_complete.json")

    assert calls["url"] == "https://example.com/data/tao_te_ching_complete.json"
    assert calls["timeout"] == chapters_mod.FETCH_TIMEOUT
    assert len(store) == 81


def test_unreachable_url_is_load_error(monkeypatch) -> None:
    def _fake_get(url, timeout):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(chapters_mod.requests, "get", _fake_get)

    store = ChapterStore()
    with pytest.raises(LoadError) as excinfo:
        store.load("http://example.com/chapters.json")
    assert "offline" in str(excinfo.value)
    assert not store.loaded


def test_as_payload_uses_source_field_names(loaded_store) -> None:
    payload = loaded_store.get(8).as_payload()
    assert payload["chapter_number"] == 8
    assert payload["modern_translation"] == "The highest good is like WATER."
    assert payload["keywords"] == ["humility", "Flow"]
