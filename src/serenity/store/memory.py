"""In-process key-value store."""

from __future__ import annotations

from serenity.store.base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Values are only lost with the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
