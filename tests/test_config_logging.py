"""Tests for config and logging."""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from rooms_mgmt.config import PostgresConfig, RoomsMgmtConfig, StorageConfig
from rooms_mgmt.exceptions import ConfigurationError
from rooms_mgmt.backends import MemoryKeyValueStore
from rooms_mgmt.logging import JsonFormatter, setup_logging
from rooms_mgmt.store import RentalDataStore


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("rooms_mgmt").setLevel(logging.NOTSET)


class TestPostgresConfig:
    """Tests for PostgresConfig."""

    def test_default_values(self) -> None:
        config = PostgresConfig()

        assert config.host == "localhost"
        assert config.port == 5432
        assert config.database == "rooms_mgmt"
        assert config.table == "rooms_mgmt_kv"

    def test_connection_string(self) -> None:
        config = PostgresConfig(host="db", port=5433, database="rent", user="landlord", password="secret")

        assert config.connection_string == "postgresql://landlord:secret@db:5433/rent"


class TestStorageConfig:
    """Tests for StorageConfig."""

    def test_default_values(self) -> None:
        config = StorageConfig()

        assert config.backend == "json"
        assert config.json_path == Path("rooms_mgmt.json")
        assert config.key_prefix == "@rooms_mgmt_"

    def test_unknown_backend(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown storage backend"):
            StorageConfig(backend="sqlite")


class TestRoomsMgmtConfig:
    """Tests for RoomsMgmtConfig."""

    def test_default_values(self) -> None:
        config = RoomsMgmtConfig()

        assert config.strict is False
        assert config.log_level == "INFO"
        assert config.log_format == "standard"
        assert config.seed is None

    def test_from_env_defaults(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            config = RoomsMgmtConfig.from_env()

        assert config.storage.backend == "json"
        assert config.postgres.port == 5432
        assert config.strict is False

    def test_from_env_custom(self) -> None:
        env = {
            "ROOMS_MGMT_BACKEND": "POSTGRES",
            "ROOMS_MGMT_JSON_PATH": "/data/rooms.json",
            "ROOMS_MGMT_KEY_PREFIX": "test:",
            "POSTGRES_HOST": "db",
            "POSTGRES_PORT": "5433",
            "ROOMS_MGMT_KV_TABLE": "kv",
            "ROOMS_MGMT_STRICT": "true",
            "LOG_LEVEL": "DEBUG",
            "LOG_FORMAT": "json",
            "SEED": "7",
        }
        with patch.dict("os.environ", env, clear=True):
            config = RoomsMgmtConfig.from_env()

        assert config.storage.backend == "postgres"
        assert config.storage.json_path == Path("/data/rooms.json")
        assert config.storage.key_prefix == "test:"
        assert config.postgres.host == "db"
        assert config.postgres.port == 5433
        assert config.postgres.table == "kv"
        assert config.strict is True
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        assert config.seed == 7

    def test_from_env_invalid_port(self) -> None:
        with patch.dict("os.environ", {"POSTGRES_PORT": "five"}, clear=True):
            with pytest.raises(ConfigurationError, match="POSTGRES_PORT"):
                RoomsMgmtConfig.from_env()

    def test_from_env_invalid_seed(self) -> None:
        with patch.dict("os.environ", {"SEED": "abc"}, clear=True):
            with pytest.raises(ConfigurationError, match="SEED"):
                RoomsMgmtConfig.from_env()

    def test_from_env_invalid_backend(self) -> None:
        with patch.dict("os.environ", {"ROOMS_MGMT_BACKEND": "redis"}, clear=True):
            with pytest.raises(ConfigurationError):
                RoomsMgmtConfig.from_env()


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_standard_format(self) -> None:
        setup_logging(level="DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("rooms_mgmt").level == logging.DEBUG
        assert logging.getLogger("psycopg").level == logging.WARNING

    def test_json_format(self) -> None:
        setup_logging(level="WARNING", format_type="json")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_invalid_level_falls_back_to_info(self) -> None:
        setup_logging(level="CHATTY")

        assert logging.getLogger().level == logging.INFO


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_format_record(self) -> None:
        record = logging.LogRecord("rooms_mgmt.store", logging.INFO, __file__, 1, "Saved %d rooms", (3,), None)

        data = json.loads(JsonFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "rooms_mgmt.store"
        assert data["message"] == "Saved 3 rooms"
        assert "timestamp" in data

    def test_format_exception(self) -> None:
        try:
            raise ValueError("corrupt")
        except ValueError:
            import sys

            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        data = json.loads(JsonFormatter().format(record))

        assert "ValueError: corrupt" in data["exception"]

    def test_extra_fields(self) -> None:
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", (), None)
        record.extra = {"room_id": "r1"}

        data = json.loads(JsonFormatter().format(record))

        assert data["room_id"] == "r1"

    def test_store_read_failure_carries_key(self, caplog: pytest.LogCaptureFixture) -> None:
        backend = MemoryKeyValueStore({"@rooms_mgmt_rooms": "{not json"})

        with caplog.at_level(logging.ERROR, logger="rooms_mgmt"):
            assert RentalDataStore(backend).get_rooms() == []

        data = json.loads(JsonFormatter().format(caplog.records[-1]))

        assert data["key"] == "@rooms_mgmt_rooms"
        assert data["message"] == "Error getting @rooms_mgmt_rooms"
        assert "DeserializationError" in data["exception"]
