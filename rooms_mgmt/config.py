"""Configuration management for rooms-mgmt."""

from dataclasses import dataclass, field
from pathlib import Path

from rooms_mgmt.exceptions import ConfigurationError

BACKENDS = ("memory", "json", "postgres")


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration for the key-value table."""

    host: str = "localhost"
    port: int = 5432
    database: str = "rooms_mgmt"
    user: str = "postgres"
    password: str = "postgres"
    table: str = "rooms_mgmt_kv"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class StorageConfig:
    """Which key-value backend holds the collections, and under which keys."""

    backend: str = "json"
    json_path: Path = field(default_factory=lambda: Path("rooms_mgmt.json"))
    key_prefix: str = "@rooms_mgmt_"

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown storage backend {self.backend!r}; expected one of {', '.join(BACKENDS)}"
            )


@dataclass
class RoomsMgmtConfig:
    """Main configuration for rooms-mgmt."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    strict: bool = False  # propagate storage errors instead of logging them
    log_level: str = "INFO"
    log_format: str = "standard"
    seed: int | None = None

    @classmethod
    def from_env(cls) -> "RoomsMgmtConfig":
        """Create config from environment variables."""
        import os

        storage = StorageConfig(
            backend=os.getenv("ROOMS_MGMT_BACKEND", "json").lower(),
            json_path=Path(os.getenv("ROOMS_MGMT_JSON_PATH", "rooms_mgmt.json")),
            key_prefix=os.getenv("ROOMS_MGMT_KEY_PREFIX", "@rooms_mgmt_"),
        )

        try:
            port = int(os.getenv("POSTGRES_PORT", "5432"))
        except ValueError as e:
            raise ConfigurationError(f"POSTGRES_PORT must be an integer: {e}") from e

        try:
            seed = int(os.getenv("SEED")) if os.getenv("SEED") else None
        except ValueError as e:
            raise ConfigurationError(f"SEED must be an integer: {e}") from e

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=port,
            database=os.getenv("POSTGRES_DB", "rooms_mgmt"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
            table=os.getenv("ROOMS_MGMT_KV_TABLE", "rooms_mgmt_kv"),
        )

        return cls(
            storage=storage,
            postgres=postgres,
            strict=os.getenv("ROOMS_MGMT_STRICT", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
            seed=seed,
        )
