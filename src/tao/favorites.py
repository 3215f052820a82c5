from __future__ import annotations

import json

from .logging_utils import debug_log
from .storage import KeyValueStore

FAVORITES_KEY = "tao-favorites"


class MalformedFavoritesError(ValueError):
    """Raised when stored favorites are not a JSON array of integers."""


def decode_favorites(raw: str) -> list[int]:
    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise MalformedFavoritesError(f"Favorites are not valid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise MalformedFavoritesError("Favorites must be a JSON array.")
    ordinals: list[int] = []
    for value in payload:
        if not isinstance(value, int) or isinstance(value, bool):
            raise MalformedFavoritesError(f"Favorite entry {value!r} is not an integer.")
        if value not in ordinals:
            ordinals.append(value)
    return ordinals


def encode_favorites(ordinals: list[int]) -> str:
    return json.dumps(ordinals)


class FavoritesLedger:
    """
    Set of favorited chapter ordinals, written through to a key-value store.

    Entries keep the order in which they were added. Every toggle rewrites the
    complete set under FAVORITES_KEY. The ledger does not check ordinals
    against the loaded chapters.
    """

    def __init__(self, store: KeyValueStore, *, key: str = FAVORITES_KEY) -> None:
        self.store = store
        self.key = key
        self._ordinals: list[int] = []

    def load(self) -> set[int]:
        raw = self.store.get(self.key)
        if raw is None:
            self._ordinals = []
            return set()
        try:
            self._ordinals = decode_favorites(raw)
        except MalformedFavoritesError as exc:
            debug_log(f"resetting favorites: {exc}")
            self._ordinals = []
        return set(self._ordinals)

    def toggle(self, ordinal: int) -> bool:
        if ordinal in self._ordinals:
            updated = [value for value in self._ordinals if value != ordinal]
            favorited = False
        else:
            updated = [*self._ordinals, ordinal]
            favorited = True
        # Memory only changes once the store accepted the write.
        self.store.set(self.key, encode_favorites(updated))
        self._ordinals = updated
        return favorited

    def is_favorite(self, ordinal: int) -> bool:
        return ordinal in self._ordinals

    def ordinals(self) -> list[int]:
        return list(self._ordinals)

    def __len__(self) -> int:
        return len(self._ordinals)


__all__ = [
    "FAVORITES_KEY",
    "FavoritesLedger",
    "MalformedFavoritesError",
    "decode_favorites",
    "encode_favorites",
]
