"""Local key-value storage.

A small durable string store, the desktop counterpart of browser localStorage.
Values are strings; callers own their serialization.

File layout: a single JSON object mapping keys to string values. Every write
rewrites the whole file through a temporary file and an atomic rename.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

from kubeconfig_updater.observability import get_logger

logger = get_logger(__name__)


class PersistenceError(Exception):
    """Raised when the key-value store cannot be read or written."""

    pass


class KeyValueStore(Protocol):
    """Synchronous string key-value store."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store, used for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """Key-value store persisted to a JSON file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._data: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        """Read the backing file once and cache its contents."""
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Invalid JSON in storage file {self.path}: {e}") from e
        except OSError as e:
            raise PersistenceError(f"Cannot read storage file {self.path}: {e}") from e

        if not isinstance(raw, dict):
            raise PersistenceError(f"Storage file {self.path} does not hold a JSON object")

        self._data = {str(k): str(v) for k, v in raw.items()}
        logger.debug("Loaded local storage", path=str(self.path), keys=len(self._data))
        return self._data

    def _flush(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)
                    f.write("\n")
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise PersistenceError(f"Cannot write storage file {self.path}: {e}") from e

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = dict(self._load())
        data[key] = value
        self._flush(data)
        self._data = data

    def remove_item(self, key: str) -> None:
        data = dict(self._load())
        if data.pop(key, None) is None:
            return
        self._flush(data)
        self._data = data
