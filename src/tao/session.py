from __future__ import annotations

import random
from pathlib import Path
from typing import Sequence

from .chapters import Chapter, ChapterStore, LoadError
from .favorites import FavoritesLedger
from .logging_utils import debug_log
from .navigation import Navigator
from .search import QueryState
from .storage import KeyValueStore


class ReaderSession:
    """
    All reading state for one user: cursor, query, favorites and display flags.

    Navigation and search are mutually exclusive views sharing one cursor, so
    every navigation call clears the active query. Nothing here is global;
    independent sessions can live side by side.
    """

    def __init__(
        self,
        chapters: ChapterStore,
        store: KeyValueStore,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.chapters = chapters
        self.favorites_ledger = FavoritesLedger(store)
        self.favorites_ledger.load()
        self.navigator = Navigator(chapters, rng=rng)
        self.query = QueryState(results=chapters.chapters)
        self.show_original = False
        self.load_error: str | None = None

    @property
    def loaded(self) -> bool:
        return self.chapters.loaded

    def load(self, source: str | Path) -> bool:
        try:
            self.chapters.load(source)
        except LoadError as exc:
            self.load_error = str(exc)
            debug_log(f"chapter load failed: {exc}")
            return False
        self.load_error = None
        self.query.clear(self.chapters.chapters)
        return True

    @property
    def searching(self) -> bool:
        return self.query.searching

    def search(self, query: str) -> Sequence[Chapter]:
        return self.query.update(query, self.chapters.chapters)

    def _end_search(self) -> None:
        self.query.clear(self.chapters.chapters)

    @property
    def current(self) -> int:
        return self.navigator.current

    def current_chapter(self) -> Chapter | None:
        return self.navigator.current_chapter()

    def next(self) -> int:
        self._end_search()
        return self.navigator.next()

    def prev(self) -> int:
        self._end_search()
        return self.navigator.prev()

    def random(self) -> int | None:
        self._end_search()
        return self.navigator.random()

    def go_to(self, ordinal: int) -> bool:
        if not self.navigator.go_to(ordinal):
            return False
        self._end_search()
        return True

    def open_result(self, ordinal: int) -> bool:
        """Jump from a search result or favorites entry to its chapter."""
        return self.go_to(ordinal)

    def toggle_favorite(self, ordinal: int) -> bool:
        return self.favorites_ledger.toggle(ordinal)

    def is_favorite(self, ordinal: int) -> bool:
        return self.favorites_ledger.is_favorite(ordinal)

    def favorites(self) -> list[Chapter]:
        found: list[Chapter] = []
        for ordinal in self.favorites_ledger.ordinals():
            chapter = self.chapters.get(ordinal)
            if chapter is not None:
                found.append(chapter)
        return found

    def toggle_original(self) -> bool:
        self.show_original = not self.show_original
        return self.show_original


__all__ = ["ReaderSession"]
