"""Port for local key/value settings persistence."""

from typing import Protocol


class SettingsStorePort(Protocol):
    """Port exposing simple string key/value persistence."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value or None."""

    def set_item(self, key: str, value: str) -> None:
        """Store a value under key."""

    def remove_item(self, key: str) -> None:
        """Remove key if present."""


__all__ = ["SettingsStorePort"]
