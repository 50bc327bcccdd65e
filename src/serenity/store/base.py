"""Base key-value store interface.

Stores implement a narrow interface: get(key) -> value | None, set(key, value).

Stores must NOT:
- Interpret the stored value
- Merge partial updates (set always replaces the whole value)
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract durable key-value store holding string values."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the raw value stored under key, or None if absent.

        Raises:
            Exception: Any I/O failure is propagated to the caller.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Atomically replace the value stored under key.

        Raises:
            Exception: Any I/O failure is propagated; the prior value is kept.
        """
        pass
