from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Mapping

import requests

from .logging_utils import debug_log

FIRST_ORDINAL = 1
LAST_ORDINAL = 81
FETCH_TIMEOUT = 30

_REQUIRED_TEXT_FIELDS = (
    "title",
    "original_text",
    "modern_translation",
    "modern_interpretation",
)


class LoadError(RuntimeError):
    """Raised when the chapter source is unreachable or malformed."""


@dataclass(frozen=True, slots=True)
class Chapter:
    ordinal: int
    title: str
    original_text: str
    translation: str
    interpretation: str
    keywords: tuple[str, ...] = ()

    def as_payload(self) -> dict[str, object]:
        return {
            "chapter_number": self.ordinal,
            "title": self.title,
            "original_text": self.original_text,
            "modern_translation": self.translation,
            "modern_interpretation": self.interpretation,
            "keywords": list(self.keywords),
        }


def _is_url(source: str) -> bool:
    lowered = source.strip().lower()
    return lowered.startswith("http://") or lowered.startswith("https://")


def _parse_entry(position: int, entry: object) -> Chapter:
    if not isinstance(entry, Mapping):
        raise LoadError(f"Entry {position} is not an object.")
    ordinal = entry.get("chapter_number")
    # bool is an int subclass; reject it explicitly.
    if not isinstance(ordinal, int) or isinstance(ordinal, bool):
        raise LoadError(f"Entry {position} has no integer chapter_number.")
    if not FIRST_ORDINAL <= ordinal <= LAST_ORDINAL:
        raise LoadError(
            f"Entry {position} has chapter_number {ordinal} outside "
            f"{FIRST_ORDINAL}..{LAST_ORDINAL}."
        )
    for field_name in _REQUIRED_TEXT_FIELDS:
        if not isinstance(entry.get(field_name), str):
            raise LoadError(f"Chapter {ordinal} field '{field_name}' must be a string.")
    keywords = entry.get("keywords")
    if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
        raise LoadError(f"Chapter {ordinal} field 'keywords' must be a list of strings.")
    return Chapter(
        ordinal=ordinal,
        title=entry["title"],
        original_text=entry["original_text"],
        translation=entry["modern_translation"],
        interpretation=entry["modern_interpretation"],
        keywords=tuple(keywords),
    )


def parse_chapters(payload: object) -> tuple[Chapter, ...]:
    """
    Validate a decoded content document and build the chapter collection.

    The document must be a JSON array of chapter objects. Any deviation from
    the expected shape, or a repeated chapter_number, raises LoadError; no
    partially parsed collection is ever returned.
    """
    if not isinstance(payload, list):
        raise LoadError("Chapter source must be a JSON array.")
    chapters: list[Chapter] = []
    seen: set[int] = set()
    for position, entry in enumerate(payload):
        chapter = _parse_entry(position, entry)
        if chapter.ordinal in seen:
            raise LoadError(f"Duplicate chapter_number {chapter.ordinal}.")
        seen.add(chapter.ordinal)
        chapters.append(chapter)
    return tuple(chapters)


def _read_source(source: str | Path) -> str:
    if isinstance(source, str) and _is_url(source):
        try:
            response = requests.get(source, timeout=FETCH_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise LoadError(f"Failed to fetch chapters from {source}: {exc}") from exc
        response.encoding = response.encoding or "utf-8"
        return response.text
    path = Path(source).expanduser()
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"Failed to read chapters from {path}: {exc}") from exc


class ChapterStore:
    """Read-only chapter collection, populated once per session."""

    def __init__(self) -> None:
        self._chapters: tuple[Chapter, ...] = ()
        self._by_ordinal: dict[int, Chapter] = {}
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def chapters(self) -> tuple[Chapter, ...]:
        return self._chapters

    def __len__(self) -> int:
        return len(self._chapters)

    def __iter__(self) -> Iterator[Chapter]:
        return iter(self._chapters)

    def load(self, source: str | Path) -> tuple[Chapter, ...]:
        if self._loaded:
            raise LoadError("Chapter store is already loaded.")
        raw = _read_source(source)
        try:
            payload = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            raise LoadError(f"Chapter source is not valid JSON: {exc}") from exc
        chapters = parse_chapters(payload)
        self.populate(chapters)
        debug_log(f"loaded {len(chapters)} chapters from {source}")
        return chapters

    def populate(self, chapters: tuple[Chapter, ...]) -> None:
        if self._loaded:
            raise LoadError("Chapter store is already loaded.")
        self._chapters = tuple(chapters)
        self._by_ordinal = {chapter.ordinal: chapter for chapter in self._chapters}
        self._loaded = True

    def get(self, ordinal: int) -> Chapter | None:
        return self._by_ordinal.get(ordinal)

    def ordinals(self) -> list[int]:
        return [chapter.ordinal for chapter in self._chapters]

    def __contains__(self, ordinal: object) -> bool:
        return ordinal in self._by_ordinal


__all__ = [
    "Chapter",
    "ChapterStore",
    "LoadError",
    "FIRST_ORDINAL",
    "LAST_ORDINAL",
    "parse_chapters",
]
