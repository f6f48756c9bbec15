"""Key-value store adapters that hold the persisted collections."""

from rooms_mgmt.backends.base import KeyValueStore
from rooms_mgmt.backends.json_file import JsonFileKeyValueStore
from rooms_mgmt.backends.memory import MemoryKeyValueStore
from rooms_mgmt.config import RoomsMgmtConfig
from rooms_mgmt.exceptions import ConfigurationError


def create_backend(config: RoomsMgmtConfig) -> KeyValueStore:
    """Build the key-value store selected by ``config.storage.backend``."""
    backend = config.storage.backend
    if backend == "memory":
        return MemoryKeyValueStore()
    if backend == "json":
        return JsonFileKeyValueStore(config.storage.json_path)
    if backend == "postgres":
        # psycopg is only required by this backend
        from rooms_mgmt.backends.postgres import PostgresKeyValueStore

        return PostgresKeyValueStore(config.postgres.connection_string, table=config.postgres.table)
    raise ConfigurationError(f"Unknown storage backend {backend!r}")


__all__ = ["JsonFileKeyValueStore", "KeyValueStore", "MemoryKeyValueStore", "create_backend"]
