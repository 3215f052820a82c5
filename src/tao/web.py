from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from .chapters import LAST_ORDINAL, Chapter, ChapterStore
from .config import resolve_source, resolve_state_dir
from .session import ReaderSession
from .storage import KeyValueStore, StoreError, default_store

PREVIEW_LENGTH = 150
PREVIEW_KEYWORDS = 3


@dataclass
class WebConfig:
    source: str | None = None
    state_dir: Path | None = None
    host: str = "127.0.0.1"
    port: int = 2081


def _chapter_summary(chapter: Chapter, session: ReaderSession) -> dict[str, object]:
    return {
        "chapter_number": chapter.ordinal,
        "title": chapter.title,
        "preview": chapter.translation[:PREVIEW_LENGTH],
        "keywords": list(chapter.keywords[:PREVIEW_KEYWORDS]),
        "favorite": session.is_favorite(chapter.ordinal),
    }


def _chapter_detail(chapter: Chapter, session: ReaderSession) -> dict[str, object]:
    payload = chapter.as_payload()
    if not session.show_original:
        payload.pop("original_text")
    payload["favorite"] = session.is_favorite(chapter.ordinal)
    return payload


def _view_payload(session: ReaderSession) -> dict[str, object]:
    chapter = session.current_chapter()
    return {
        "current": session.current,
        "total": LAST_ORDINAL,
        "has_prev": session.navigator.has_prev,
        "has_next": session.navigator.has_next,
        "show_original": session.show_original,
        "chapter": _chapter_detail(chapter, session) if chapter else None,
    }


def create_app(
    config: WebConfig,
    *,
    store: KeyValueStore | None = None,
    chapters: ChapterStore | None = None,
) -> FastAPI:
    """
    Build the JSON API over a single reader session.

    The chapter source is loaded once here. A failed load is reported by
    /api/status and leaves every content endpoint answering 503.
    """
    if store is None:
        store = default_store(resolve_state_dir(config.state_dir))
    chapter_store = chapters if chapters is not None else ChapterStore()
    session = ReaderSession(chapter_store, store)
    source = resolve_source(config.source)
    if not chapter_store.loaded:
        session.load(source)

    app = FastAPI(title="tao reader")
    app.state.config = config
    app.state.session = session
    session_lock = threading.Lock()

    def _require_loaded() -> None:
        if not session.loaded:
            raise HTTPException(status_code=503, detail="Chapters are not loaded.")

    @app.get("/api/status")
    def api_status() -> JSONResponse:
        return JSONResponse(
            {
                "loaded": session.loaded,
                "chapters": len(session.chapters),
                "source": source,
                "error": session.load_error,
            }
        )

    @app.get("/api/chapters")
    def api_chapters() -> JSONResponse:
        _require_loaded()
        with session_lock:
            items = [_chapter_summary(ch, session) for ch in session.chapters]
        return JSONResponse({"chapters": items})

    @app.get("/api/chapters/{ordinal}")
    def api_chapter(ordinal: int) -> JSONResponse:
        _require_loaded()
        chapter = session.chapters.get(ordinal)
        if chapter is None:
            raise HTTPException(status_code=404, detail="Chapter not found")
        with session_lock:
            return JSONResponse(_chapter_detail(chapter, session))

    @app.get("/api/current")
    def api_current() -> JSONResponse:
        _require_loaded()
        with session_lock:
            return JSONResponse(_view_payload(session))

    @app.post("/api/navigate/{direction}")
    def api_navigate(direction: str) -> JSONResponse:
        _require_loaded()
        with session_lock:
            if direction == "next":
                session.next()
            elif direction == "prev":
                session.prev()
            elif direction == "random":
                session.random()
            else:
                raise HTTPException(status_code=404, detail="Unknown direction")
            return JSONResponse(_view_payload(session))

    @app.post("/api/goto/{ordinal}")
    def api_goto(ordinal: int) -> JSONResponse:
        _require_loaded()
        with session_lock:
            if not session.go_to(ordinal):
                raise HTTPException(status_code=404, detail="Chapter not found")
            return JSONResponse(_view_payload(session))

    @app.get("/api/search")
    def api_search(q: str = Query("")) -> JSONResponse:
        _require_loaded()
        with session_lock:
            results = session.search(q)
            items = [_chapter_summary(ch, session) for ch in results]
            return JSONResponse(
                {
                    "query": q,
                    "searching": session.searching,
                    "count": len(items),
                    "results": items,
                }
            )

    @app.get("/api/favorites")
    def api_favorites() -> JSONResponse:
        _require_loaded()
        with session_lock:
            items = [_chapter_summary(ch, session) for ch in session.favorites()]
        return JSONResponse({"favorites": items})

    @app.post("/api/favorites/{ordinal}/toggle")
    def api_toggle_favorite(ordinal: int) -> JSONResponse:
        _require_loaded()
        if ordinal not in session.chapters:
            raise HTTPException(status_code=404, detail="Chapter not found")
        with session_lock:
            try:
                favorited = session.toggle_favorite(ordinal)
            except StoreError as exc:
                raise HTTPException(status_code=500, detail=f"Failed to save favorites: {exc}") from exc
        return JSONResponse({"chapter_number": ordinal, "favorite": favorited})

    @app.post("/api/original/toggle")
    def api_toggle_original() -> JSONResponse:
        with session_lock:
            return JSONResponse({"show_original": session.toggle_original()})

    return app


__all__ = ["WebConfig", "create_app"]
