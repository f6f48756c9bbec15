"""Persistence façade for rental entities."""

from rooms_mgmt.backends import create_backend
from rooms_mgmt.config import RoomsMgmtConfig
from rooms_mgmt.store.rental import RentalDataStore, StoreKeys, WriteResult, new_id


def open_store(config: RoomsMgmtConfig | None = None) -> RentalDataStore:
    """Build a ``RentalDataStore`` on the backend selected by ``config``.

    Construct it once at startup and pass it to whatever needs it.
    """
    config = config or RoomsMgmtConfig.from_env()
    return RentalDataStore(
        create_backend(config),
        keys=StoreKeys.with_prefix(config.storage.key_prefix),
        strict=config.strict,
    )


__all__ = ["RentalDataStore", "StoreKeys", "WriteResult", "new_id", "open_store"]
