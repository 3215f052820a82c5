from __future__ import annotations

import os
from pathlib import Path

SOURCE_ENV = "TAO_SOURCE"
STATE_DIR_ENV = "TAO_STATE_DIR"
DEFAULT_SOURCE_FILENAME = "tao_te_ching_complete.json"


def resolve_source(value: str | None = None) -> str:
    """Pick the chapter source: explicit value, then TAO_SOURCE, then the default file."""
    if value:
        return value
    env_source = os.environ.get(SOURCE_ENV)
    if env_source:
        return env_source
    return str(Path.cwd() / DEFAULT_SOURCE_FILENAME)


def resolve_state_dir(value: str | Path | None = None) -> Path:
    if value:
        return Path(value).expanduser()
    env_dir = os.environ.get(STATE_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    return Path.home() / ".local" / "share" / "tao"


__all__ = [
    "DEFAULT_SOURCE_FILENAME",
    "SOURCE_ENV",
    "STATE_DIR_ENV",
    "resolve_source",
    "resolve_state_dir",
]
