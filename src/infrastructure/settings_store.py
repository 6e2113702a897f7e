"""Local key/value settings stores."""

import json
import threading
from pathlib import Path

from src.application.ports.settings_store import SettingsStorePort
from src.infrastructure.logging.logger import get_app_logger


class InMemorySettingsStore(SettingsStorePort):
    """Settings store kept in a dictionary for the process lifetime."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileSettingsStore(SettingsStorePort):
    """Settings store persisted as a flat JSON object on disk.

    The file is read on every access so separate processes sharing it see
    each other's writes. A missing or unreadable file behaves as empty.
    """

    def __init__(self, path: Path | str, logger=None) -> None:
        """Initialize the store.

        Args:
            path: Location of the JSON file; parent folders are created.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._path = Path(path)
        self._logger = logger or get_app_logger()
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._read()
            items[key] = str(value)
            self._write(items)

    def remove_item(self, key: str) -> None:
        with self._lock:
            items = self._read()
            if key in items:
                del items[key]
                self._write(items)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            self._logger.warning(
                f"Ignoring unreadable settings file {self._path}: {exc}"
            )
            return {}
        if not isinstance(data, dict):
            self._logger.warning(
                f"Ignoring settings file {self._path}: expected an object"
            )
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(items, indent=2, sort_keys=True),
            encoding="utf-8",
        )


__all__ = ["InMemorySettingsStore", "JsonFileSettingsStore"]
