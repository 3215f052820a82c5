from .chapters import Chapter, ChapterStore, LoadError, parse_chapters
from .favorites import FAVORITES_KEY, FavoritesLedger, MalformedFavoritesError
from .navigation import Navigator
from .search import QueryState, search
from .session import ReaderSession
from .storage import JsonFileStore, MemoryStore, StoreError

__all__ = [
    "Chapter",
    "ChapterStore",
    "LoadError",
    "parse_chapters",
    "FAVORITES_KEY",
    "FavoritesLedger",
    "MalformedFavoritesError",
    "Navigator",
    "QueryState",
    "search",
    "ReaderSession",
    "JsonFileStore",
    "MemoryStore",
    "StoreError",
]
