from __future__ import annotations

import json
from pathlib import Path

import pytest

from tao.chapters import ChapterStore, parse_chapters


def _chapter_payload(number: int) -> dict[str, object]:
    if number == 1:
        return {
            "chapter_number": 1,
            "title": "Tao",
            "original_text": "道可道，非常道。",
            "modern_translation": "The Way that can be spoken is not the eternal Way.",
            "modern_interpretation": "Words point at the source but never hold it.",
            "keywords": ["Way", "naming", "mystery"],
        }
    if number == 8:
        return {
            "chapter_number": 8,
            "title": "Highest Good",
            "original_text": "上善若水。",
            "modern_translation": "The highest good is like WATER.",
            "modern_interpretation": "Water nourishes without contending.",
            "keywords": ["humility", "Flow"],
        }
    return {
        "chapter_number": number,
        "title": f"Verse {number}",
        "original_text": f"第{number}章",
        "modern_translation": f"Translation of verse {number}.",
        "modern_interpretation": f"Commentary on verse {number}.",
        "keywords": ["virtue", f"theme-{number}"],
    }


@pytest.fixture
def full_payload() -> list[dict[str, object]]:
    return [_chapter_payload(number) for number in range(1, 82)]


@pytest.fixture
def source_file(tmp_path: Path, full_payload) -> Path:
    path = tmp_path / "tao_te_ching_complete.json"
    path.write_text(json.dumps(full_payload, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def loaded_store(full_payload) -> ChapterStore:
    store = ChapterStore()
    store.populate(parse_chapters(full_payload))
    return store
