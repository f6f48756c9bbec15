"""PostgreSQL-backed key-value store."""

import logging

import psycopg
from psycopg import sql

from rooms_mgmt.backends.base import KeyValueStore
from rooms_mgmt.exceptions import StorageError

logger = logging.getLogger(__name__)


class PostgresKeyValueStore(KeyValueStore):
    """Store each key as one row of a two-column table.

    Parameters
    ----------
    connection_string : str
        PostgreSQL connection URL.
    table : str
        Table holding the key-value rows. Created if missing.
    """

    def __init__(self, connection_string: str, table: str = "rooms_mgmt_kv") -> None:
        self.table = table
        try:
            self._conn = psycopg.connect(connection_string, autocommit=True)
        except psycopg.Error as e:
            raise StorageError(f"Cannot connect to PostgreSQL: {e}") from e
        self._table = sql.Identifier(table)
        self._execute(
            sql.SQL("CREATE TABLE IF NOT EXISTS {} (key TEXT PRIMARY KEY, value TEXT NOT NULL)").format(
                self._table
            )
        )
        logger.info("Using PostgreSQL table %s for key-value storage", table)

    def get(self, key: str) -> str | None:
        row = self._execute(
            sql.SQL("SELECT value FROM {} WHERE key = %s").format(self._table),
            (key,),
            fetch=True,
        )
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        self._execute(
            sql.SQL(
                "INSERT INTO {} (key, value) VALUES (%s, %s) "
                "ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value"
            ).format(self._table),
            (key, value),
        )

    def delete(self, key: str) -> None:
        self._execute(sql.SQL("DELETE FROM {} WHERE key = %s").format(self._table), (key,))

    def close(self) -> None:
        self._conn.close()

    def _execute(
        self,
        query: sql.Composed,
        params: tuple = (),
        fetch: bool = False,
    ) -> tuple | None:
        try:
            with self._conn.cursor() as cur:
                cur.execute(query, params)
                return cur.fetchone() if fetch else None
        except psycopg.Error as e:
            raise StorageError(f"PostgreSQL key-value operation failed: {e}") from e
