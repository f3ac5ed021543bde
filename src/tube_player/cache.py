"""In-memory cache handed to the platform client during construction."""

from typing import Any


class SessionCache:
    """
    Key/value cache for player scripts and session data.

    A disabled cache accepts writes and answers every read with a miss, so
    a retried client construction never sees data from the failed attempt.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._entries: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        if not self.enabled:
            return None
        return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        if self.enabled:
            self._entries[key] = value

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["SessionCache"]
