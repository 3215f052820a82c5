from __future__ import annotations

import random as _random

from .chapters import FIRST_ORDINAL, LAST_ORDINAL, Chapter, ChapterStore


class Navigator:
    """
    Cursor over the chapter collection.

    prev/next clamp at FIRST_ORDINAL and LAST_ORDINAL without wrapping, even
    when the loaded collection is incomplete. go_to only accepts ordinals that
    are present in the store; anything else is ignored.
    """

    def __init__(self, store: ChapterStore, *, rng: _random.Random | None = None) -> None:
        self.store = store
        self.rng = rng or _random.Random()
        self._current = FIRST_ORDINAL

    @property
    def current(self) -> int:
        return self._current

    @property
    def has_prev(self) -> bool:
        return self._current > FIRST_ORDINAL

    @property
    def has_next(self) -> bool:
        return self._current < LAST_ORDINAL

    def current_chapter(self) -> Chapter | None:
        return self.store.get(self._current)

    def go_to(self, ordinal: int) -> bool:
        if ordinal not in self.store:
            return False
        self._current = ordinal
        return True

    def next(self) -> int:
        if self.has_next:
            self._current += 1
        return self._current

    def prev(self) -> int:
        if self.has_prev:
            self._current -= 1
        return self._current

    def random(self) -> int | None:
        ordinals = self.store.ordinals()
        if not ordinals:
            return None
        self._current = self.rng.choice(ordinals)
        return self._current


__all__ = ["Navigator"]
