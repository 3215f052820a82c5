from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .chapters import Chapter


def is_blank(query: str) -> bool:
    return not query.strip()


def chapter_matches(chapter: Chapter, needle: str) -> bool:
    """Return True when the case-folded needle occurs in a searched field."""
    if needle in chapter.title.casefold():
        return True
    if needle in chapter.translation.casefold():
        return True
    if needle in chapter.interpretation.casefold():
        return True
    return any(needle in keyword.casefold() for keyword in chapter.keywords)


def search(chapters: Sequence[Chapter], query: str) -> Sequence[Chapter]:
    # Blank queries return the collection itself, unfiltered.
    if is_blank(query):
        return chapters
    needle = query.casefold()
    return tuple(chapter for chapter in chapters if chapter_matches(chapter, needle))


@dataclass
class QueryState:
    query: str = ""
    results: Sequence[Chapter] = field(default_factory=tuple)

    @property
    def searching(self) -> bool:
        return not is_blank(self.query)

    def update(self, query: str, chapters: Sequence[Chapter]) -> Sequence[Chapter]:
        self.query = query
        self.results = search(chapters, query)
        return self.results

    def clear(self, chapters: Sequence[Chapter]) -> None:
        self.query = ""
        self.results = chapters


__all__ = ["QueryState", "chapter_matches", "is_blank", "search"]
