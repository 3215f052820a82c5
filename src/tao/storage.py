from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from .logging_utils import debug_log

STORE_FILENAME = "store.json"


class StoreError(RuntimeError):
    """Raised when the durable store cannot be written."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Process-local store; values vanish with the object."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileStore:
    """
    Key-value store persisted as one JSON object on disk.

    Values are opaque strings (callers JSON-encode their own payloads). The
    whole file is rewritten on every set. A missing or unreadable file reads
    as an empty store.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, RecursionError) as exc:
            debug_log(f"ignoring unreadable store {self.path}: {exc}")
            return {}
        if not isinstance(raw, dict):
            debug_log(f"ignoring non-object store {self.path}")
            return {}
        return {key: value for key, value in raw.items() if isinstance(value, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._read_all()
        values[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            tmp_path.write_text(
                json.dumps(values, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            tmp_path.replace(self.path)
        except OSError as exc:
            raise StoreError(f"Failed to write store {self.path}: {exc}") from exc


def default_store(state_dir: Path) -> JsonFileStore:
    return JsonFileStore(Path(state_dir).expanduser() / STORE_FILENAME)


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "StoreError",
    "STORE_FILENAME",
    "default_store",
]
