"""In-memory key-value store for tests and throwaway sessions."""

from rooms_mgmt.backends.base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store; contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)
