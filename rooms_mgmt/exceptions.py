"""Custom exception hierarchy for rooms-mgmt."""


class RoomsMgmtError(Exception):
    """Base exception for all rooms-mgmt errors."""


class InvalidEntityStateError(RoomsMgmtError):
    """Raised when an entity is in an invalid state for the operation."""


class ConfigurationError(RoomsMgmtError):
    """Raised when configuration is invalid or missing."""


class StorageError(RoomsMgmtError):
    """Raised when the key-value backend fails to read or write."""


class DeserializationError(StorageError):
    """Raised when a stored value cannot be decoded."""
