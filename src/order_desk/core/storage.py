"""Durable key-value storage for client-side state (token, user, language, theme)."""
import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

# Named entries written by the session store and preferences
TOKEN_KEY = "token"
USER_KEY = "user"
LANGUAGE_KEY = "language"
THEME_KEY = "theme"


class KeyValueStorage(Protocol):
    """String-valued storage with one named entry per key."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage. Contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStorage:
    """
    Storage persisted as a single JSON object on disk.

    The file is re-read on every access so separate processes (e.g. successive
    CLI invocations) observe each other's writes. An unreadable or malformed
    file is treated as empty; the next write replaces it.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("storage_read_failed path=%s error=%s", self._path, e)
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("storage_corrupt path=%s", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("storage_corrupt path=%s", self._path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._path)

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    def __contains__(self, key: str) -> bool:
        return key in self._load()
