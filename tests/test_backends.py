"""Tests for key-value backends."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from rooms_mgmt.backends import JsonFileKeyValueStore, MemoryKeyValueStore, create_backend
from rooms_mgmt.backends.postgres import PostgresKeyValueStore
from rooms_mgmt.config import RoomsMgmtConfig, StorageConfig
from rooms_mgmt.exceptions import ConfigurationError, StorageError


class TestMemoryKeyValueStore:
    """Tests for MemoryKeyValueStore."""

    def test_get_missing(self) -> None:
        assert MemoryKeyValueStore().get("missing") is None

    def test_set_get_delete(self) -> None:
        kv = MemoryKeyValueStore()
        kv.set("a", "1")
        kv.set("a", "2")

        assert kv.get("a") == "2"

        kv.delete("a")
        kv.delete("a")
        assert kv.get("a") is None

    def test_initial_data_is_copied(self) -> None:
        initial = {"a": "1"}
        kv = MemoryKeyValueStore(initial)
        kv.set("b", "2")

        assert initial == {"a": "1"}

    def test_context_manager(self) -> None:
        with MemoryKeyValueStore() as kv:
            kv.set("a", "1")
            assert kv.get("a") == "1"


class TestJsonFileKeyValueStore:
    """Tests for JsonFileKeyValueStore."""

    def test_missing_file_reads_none(self, tmp_path: Path) -> None:
        kv = JsonFileKeyValueStore(tmp_path / "store.json")

        assert kv.get("a") is None
        assert kv.keys() == []

    def test_set_persists_across_instances(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "store.json"
        JsonFileKeyValueStore(path).set("@rooms_mgmt_branches", "[]")

        assert JsonFileKeyValueStore(path).get("@rooms_mgmt_branches") == "[]"
        assert json.loads(path.read_text(encoding="utf-8")) == {"@rooms_mgmt_branches": "[]"}
        assert not (path.parent / "store.json.tmp").exists()

    def test_pretty_output(self, tmp_path: Path) -> None:
        path = tmp_path / "store.json"
        JsonFileKeyValueStore(path, pretty=True).set("a", "1")

        assert "\n" in path.read_text(encoding="utf-8")

    def test_delete(self, tmp_path: Path) -> None:
        kv = JsonFileKeyValueStore(tmp_path / "store.json")
        kv.set("a", "1")
        kv.set("b", "2")

        kv.delete("a")
        kv.delete("missing")

        assert kv.keys() == ["b"]

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "store.json"
        path.write_text("{oops", encoding="utf-8")

        with pytest.raises(StorageError, match="not valid JSON"):
            JsonFileKeyValueStore(path).get("a")

    def test_non_object_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "store.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(StorageError, match="JSON object"):
            JsonFileKeyValueStore(path).get("a")

    def test_unwritable_path_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")

        with pytest.raises(StorageError, match="Cannot write"):
            JsonFileKeyValueStore(blocker / "store.json").set("a", "1")


class TestPostgresKeyValueStore:
    """Tests for PostgresKeyValueStore using a mocked connection."""

    @pytest.fixture
    def cursor(self) -> MagicMock:
        return MagicMock()

    @pytest.fixture
    def connect(self, cursor: MagicMock):
        with patch("rooms_mgmt.backends.postgres.psycopg.connect") as connect:
            conn = connect.return_value
            conn.cursor.return_value.__enter__.return_value = cursor
            yield connect

    def test_init_creates_table(self, connect: MagicMock, cursor: MagicMock) -> None:
        kv = PostgresKeyValueStore("postgresql://u:p@localhost/db", table="kv")

        connect.assert_called_once_with("postgresql://u:p@localhost/db", autocommit=True)
        assert cursor.execute.call_count == 1
        assert kv.table == "kv"

    def test_get(self, connect: MagicMock, cursor: MagicMock) -> None:
        kv = PostgresKeyValueStore("postgresql://localhost/db")
        cursor.fetchone.return_value = ("[]",)

        assert kv.get("@rooms_mgmt_rooms") == "[]"
        assert cursor.execute.call_args[0][1] == ("@rooms_mgmt_rooms",)

    def test_get_missing(self, connect: MagicMock, cursor: MagicMock) -> None:
        kv = PostgresKeyValueStore("postgresql://localhost/db")
        cursor.fetchone.return_value = None

        assert kv.get("missing") is None

    def test_set_and_delete(self, connect: MagicMock, cursor: MagicMock) -> None:
        kv = PostgresKeyValueStore("postgresql://localhost/db")

        kv.set("a", "1")
        assert cursor.execute.call_args[0][1] == ("a", "1")

        kv.delete("a")
        assert cursor.execute.call_args[0][1] == ("a",)

    def test_query_error_raises_storage_error(self, connect: MagicMock, cursor: MagicMock) -> None:
        kv = PostgresKeyValueStore("postgresql://localhost/db")
        cursor.execute.side_effect = psycopg.OperationalError("server closed the connection")

        with pytest.raises(StorageError, match="server closed"):
            kv.set("a", "1")

    def test_connect_error_raises_storage_error(self) -> None:
        with patch(
            "rooms_mgmt.backends.postgres.psycopg.connect",
            side_effect=psycopg.OperationalError("connection refused"),
        ):
            with pytest.raises(StorageError, match="Cannot connect"):
                PostgresKeyValueStore("postgresql://localhost/db")

    def test_close(self, connect: MagicMock) -> None:
        with PostgresKeyValueStore("postgresql://localhost/db"):
            pass

        connect.return_value.close.assert_called_once()


class TestCreateBackend:
    """Tests for create_backend."""

    def test_memory(self) -> None:
        config = RoomsMgmtConfig(storage=StorageConfig(backend="memory"))

        assert isinstance(create_backend(config), MemoryKeyValueStore)

    def test_json(self, tmp_path: Path) -> None:
        config = RoomsMgmtConfig(storage=StorageConfig(backend="json", json_path=tmp_path / "s.json"))

        kv = create_backend(config)

        assert isinstance(kv, JsonFileKeyValueStore)
        assert kv.path == tmp_path / "s.json"

    def test_postgres(self) -> None:
        config = RoomsMgmtConfig(storage=StorageConfig(backend="postgres"))

        with patch("rooms_mgmt.backends.postgres.psycopg.connect") as connect:
            kv = create_backend(config)

        assert isinstance(kv, PostgresKeyValueStore)
        connect.assert_called_once_with(config.postgres.connection_string, autocommit=True)

    def test_unknown_backend(self) -> None:
        config = RoomsMgmtConfig(storage=StorageConfig(backend="memory"))
        config.storage.backend = "redis"

        with pytest.raises(ConfigurationError, match="redis"):
            create_backend(config)
