"""Abstract string-keyed key-value store."""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Persistent map from string keys to string values.

    Implementations raise ``StorageError`` when the underlying medium
    cannot be read or written.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""

    def close(self) -> None:
        """Release resources held by the store."""

    def __enter__(self) -> "KeyValueStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
