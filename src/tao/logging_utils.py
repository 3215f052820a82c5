from __future__ import annotations

from copy import copy, deepcopy
from typing import Any
from urllib.parse import unquote, unquote_plus

from uvicorn.config import LOGGING_CONFIG
from uvicorn.logging import AccessFormatter as UvicornAccessFormatter

_DEBUG_LOG = False


def set_debug_logging(enabled: bool) -> None:
    global _DEBUG_LOG
    _DEBUG_LOG = enabled


def debug_log(message: str) -> None:
    if _DEBUG_LOG:
        print(f"[tao debug] {message}")


def decode_request_target(target: str) -> str:
    """Decode a request path and its query string for display in access logs.

    Query strings use form encoding, so '+' becomes a space there but not in
    the path.
    """
    path, sep, query = target.partition("?")
    decoded = unquote(path, encoding="utf-8", errors="replace")
    if sep:
        decoded += "?" + unquote_plus(query, encoding="utf-8", errors="replace")
    return decoded


class Utf8AccessFormatter(UvicornAccessFormatter):
    """Access log formatter that shows search queries as typed."""

    def formatMessage(self, record):  # type: ignore[override]
        client_addr, method, full_path, http_version, status_code = record.args
        new_record = copy(record)
        new_record.args = (
            client_addr,
            method,
            decode_request_target(full_path),
            http_version,
            status_code,
        )
        return super().formatMessage(new_record)


def build_uvicorn_log_config() -> dict[str, Any]:
    """Return uvicorn's default logging config with the decoding access formatter."""
    config = deepcopy(LOGGING_CONFIG)
    access = config["formatters"]["access"]
    access["()"] = f"{__name__}.Utf8AccessFormatter"
    return config
