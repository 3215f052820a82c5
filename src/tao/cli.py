from __future__ import annotations

import argparse
import sys
import tomllib
from importlib import metadata
from pathlib import Path
from typing import Callable, Sequence

import uvicorn
from rich.console import Console
from rich.markup import escape

from .chapters import LAST_ORDINAL, Chapter, ChapterStore
from .config import resolve_source, resolve_state_dir
from .logging_utils import build_uvicorn_log_config, set_debug_logging
from .session import ReaderSession
from .storage import StoreError, default_store
from .web import WebConfig, create_app

PREVIEW_LENGTH = 150


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover - defensive
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("tao-reader")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"tao {__version__}",
    )


def _common_flags() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--source",
        help="Chapter JSON file or http(s) URL (default: $TAO_SOURCE or ./tao_te_ching_complete.json).",
    )
    common.add_argument(
        "--state-dir",
        help="Directory for the favorites store (default: $TAO_STATE_DIR or ~/.local/share/tao).",
    )
    common.add_argument(
        "--debug",
        action="store_true",
        help="Print debug messages (load details, store recovery).",
    )
    return common


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="tao",
        description="Read, search and bookmark the 81 chapters of the Tao Te Ching.",
    )
    _add_version_flag(ap)
    common = _common_flags()
    subparsers = ap.add_subparsers(dest="command")

    read = subparsers.add_parser("read", parents=[common], help="Show one chapter.")
    read.add_argument("chapter", nargs="?", type=int, default=1, help="Chapter number (default: 1).")
    read.add_argument("--original", action="store_true", help="Include the original Chinese text.")

    search = subparsers.add_parser("search", parents=[common], help="List chapters matching a phrase.")
    search.add_argument("query", nargs="+", help="Text to look for in titles, translations, commentary and keywords.")

    rand = subparsers.add_parser("random", parents=[common], help="Show a randomly chosen chapter.")
    rand.add_argument("--original", action="store_true", help="Include the original Chinese text.")

    favorite = subparsers.add_parser("favorite", parents=[common], help="Toggle a chapter's favorite mark.")
    favorite.add_argument("chapter", type=int)

    subparsers.add_parser("favorites", parents=[common], help="List favorite chapters.")
    subparsers.add_parser("browse", parents=[common], help="Interactive reader (n/p/r/s/f/o/g/q).")

    web = subparsers.add_parser("web", parents=[common], help="Serve the reader as a local JSON API.")
    web.add_argument("--host", default="127.0.0.1", help="Host interface (default: 127.0.0.1).")
    web.add_argument("--port", type=int, default=2081, help="Port (default: 2081).")
    return ap


def _open_session(args: argparse.Namespace, console: Console) -> ReaderSession | None:
    store = default_store(resolve_state_dir(args.state_dir))
    session = ReaderSession(ChapterStore(), store)
    source = resolve_source(args.source)
    with console.status(f"Loading chapters from {escape(source)}"):
        loaded = session.load(source)
    if not loaded:
        print(f"Failed to load chapters: {session.load_error}", file=sys.stderr)
        return None
    return session


def _render_chapter(console: Console, session: ReaderSession, chapter: Chapter) -> None:
    star = "★" if session.is_favorite(chapter.ordinal) else "☆"
    console.print(f"[bold]{escape(chapter.title)}[/bold] {star}")
    console.print(f"[yellow]Chapter {chapter.ordinal} of {LAST_ORDINAL}[/yellow]\n")
    if session.show_original:
        console.print("[bold]Original Chinese Text[/bold]")
        console.print(escape(chapter.original_text) + "\n")
    console.print("[bold]Modern Translation[/bold]")
    console.print(escape(chapter.translation) + "\n")
    console.print("[bold]Modern Interpretation[/bold]")
    console.print(escape(chapter.interpretation) + "\n")
    if chapter.keywords:
        console.print("[bold]Key Themes[/bold]")
        console.print(", ".join(escape(keyword) for keyword in chapter.keywords))


def _render_listing(
    console: Console,
    session: ReaderSession,
    chapters: Sequence[Chapter],
    heading: str,
) -> None:
    console.print(f"[bold]{escape(heading)} ({len(chapters)})[/bold]")
    for chapter in chapters:
        star = "★" if session.is_favorite(chapter.ordinal) else "☆"
        preview = chapter.translation[:PREVIEW_LENGTH]
        console.print(f"{star} [yellow]{chapter.ordinal:>2}[/yellow] {escape(chapter.title)}")
        if preview:
            console.print(f"     [dim]{escape(preview)}[/dim]")


def _show_current(session: ReaderSession, console: Console) -> int:
    chapter = session.current_chapter()
    if chapter is None:
        print(f"Chapter {session.current} is not available.", file=sys.stderr)
        return 1
    _render_chapter(console, session, chapter)
    return 0


def _run_read(session: ReaderSession, args: argparse.Namespace, console: Console) -> int:
    if not session.go_to(args.chapter):
        print(f"Chapter {args.chapter} not found.", file=sys.stderr)
        return 1
    if args.original:
        session.toggle_original()
    return _show_current(session, console)


def _run_random(session: ReaderSession, args: argparse.Namespace, console: Console) -> int:
    if session.random() is None:
        print("No chapters available.", file=sys.stderr)
        return 1
    if args.original:
        session.toggle_original()
    return _show_current(session, console)


def _run_search(session: ReaderSession, args: argparse.Namespace, console: Console) -> int:
    query = " ".join(args.query)
    results = session.search(query)
    _render_listing(console, session, results, "Search Results")
    return 0


def _run_favorite(session: ReaderSession, args: argparse.Namespace, console: Console) -> int:
    if args.chapter not in session.chapters:
        print(f"Chapter {args.chapter} not found.", file=sys.stderr)
        return 1
    try:
        favorited = session.toggle_favorite(args.chapter)
    except StoreError as exc:
        print(f"Failed to save favorites: {exc}", file=sys.stderr)
        return 1
    state = "added to" if favorited else "removed from"
    console.print(f"Chapter {args.chapter} {state} favorites.")
    return 0


def _run_favorites(session: ReaderSession, args: argparse.Namespace, console: Console) -> int:
    _render_listing(console, session, session.favorites(), "Favorites")
    return 0


def run_browse(
    session: ReaderSession,
    console: Console,
    read_line: Callable[[str], str] = input,
) -> int:
    """Drive a session from single-letter commands until 'q' or EOF."""
    show_current = True
    while True:
        if show_current:
            chapter = session.current_chapter()
            if chapter is None:
                console.print(f"[dim]Chapter {session.current} is not available.[/dim]")
            else:
                _render_chapter(console, session, chapter)
        show_current = True
        try:
            line = read_line("\n[n]ext [p]rev [r]andom [s]earch [g]oto [f]avorite [o]riginal [q]uit > ")
        except EOFError:
            return 0
        command, _, rest = line.strip().partition(" ")
        command = command.lower()
        if command in {"q", "quit"}:
            return 0
        if command == "n":
            session.next()
        elif command == "p":
            session.prev()
        elif command == "r":
            session.random()
        elif command == "o":
            session.toggle_original()
        elif command == "f":
            if session.current not in session.chapters:
                console.print(f"[red]No chapter {session.current}.[/red]")
                show_current = False
                continue
            try:
                session.toggle_favorite(session.current)
            except StoreError as exc:
                console.print(f"[red]Failed to save favorites: {escape(str(exc))}[/red]")
                show_current = False
        elif command == "g":
            target = rest.strip()
            # isdigit() also accepts superscripts that int() rejects.
            if not target.isdecimal() or not session.go_to(int(target)):
                console.print(f"[red]No chapter {escape(target)}.[/red]")
                show_current = False
        elif command == "s":
            results = session.search(rest)
            _render_listing(console, session, results, "Search Results")
            show_current = False
        else:
            console.print(f"[red]Unknown command: {escape(command)}[/red]")
            show_current = False


def _run_web(args: argparse.Namespace) -> int:
    config = WebConfig(
        source=args.source,
        state_dir=Path(args.state_dir).expanduser() if args.state_dir else None,
        host=args.host,
        port=args.port,
    )
    app = create_app(config)
    print(f"Serving tao reader at http://{args.host}:{args.port}/api/current")
    print("Press Ctrl+C to stop.\n")
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level="info",
        log_config=build_uvicorn_log_config(),
    )
    return 0


_SESSION_COMMANDS = {
    "read": _run_read,
    "random": _run_random,
    "search": _run_search,
    "favorite": _run_favorite,
    "favorites": _run_favorites,
}


def main(argv: list[str] | None = None, *, console: Console | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    set_debug_logging(bool(args.debug))
    if args.command == "web":
        return _run_web(args)

    console = console or Console()
    session = _open_session(args, console)
    if session is None:
        return 1
    if args.command == "browse":
        return run_browse(session, console)
    return _SESSION_COMMANDS[args.command](session, args, console)


if __name__ == "__main__":
    raise SystemExit(main())
