"""JSON file key-value store for on-device persistence."""

import json
import logging
import os
from pathlib import Path

from rooms_mgmt.backends.base import KeyValueStore
from rooms_mgmt.exceptions import StorageError

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """Keep every key in a single JSON object file.

    The file is re-read on every access so that edits made by another
    instance are picked up; writes replace the file atomically.
    """

    def __init__(self, path: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file store.

        Parameters
        ----------
        path : str | Path
            File holding the key-value map. Created on first write.
        pretty : bool
            Pretty-print the file.
        """
        self.path = Path(path)
        self.pretty = pretty

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def keys(self) -> list[str]:
        """All keys currently stored in the file."""
        return list(self._read())

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        except ValueError as e:
            raise StorageError(f"{self.path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not contain a JSON object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e
        logger.debug("Wrote %d keys to %s", len(data), self.path)
