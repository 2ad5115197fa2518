"""
Key/value storage backends
String keys to string values, in memory or in a single JSON file
"""

import json
import logging
from pathlib import Path
from typing import Optional

_LOG = logging.getLogger(__name__)


class StorageError(Exception):
    """Persisted storage could not be written"""


class StorageQuotaError(StorageError):
    """A write would exceed the storage quota"""


class KeyValueStorage:
    """Minimal string key/value contract used by group persistence"""

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._data: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        updated = dict(self._data)
        updated[key] = value
        self._check_quota(updated)
        self._commit(updated)

    def remove_item(self, key: str) -> None:
        if key not in self._data:
            return
        updated = dict(self._data)
        del updated[key]
        self._commit(updated)

    def keys(self) -> list[str]:
        return list(self._data)

    def used_bytes(self, data: Optional[dict[str, str]] = None) -> int:
        data = self._data if data is None else data
        return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in data.items())

    def _check_quota(self, data: dict[str, str]) -> None:
        if self.quota_bytes is None:
            return
        size = self.used_bytes(data)
        if size > self.quota_bytes:
            raise StorageQuotaError(
                f"Storage quota exceeded ({size} > {self.quota_bytes} bytes)"
            )

    def _commit(self, data: dict[str, str]) -> None:
        self._data = data


class MemoryStorage(KeyValueStorage):
    """Process-local storage, lost on exit"""


class JsonFileStorage(KeyValueStorage):
    """Storage persisted as one JSON object in a file.

    The file is re-read before every access so that another process's
    writes are picked up; concurrent writers may still overwrite each other.
    """

    def __init__(self, filepath: Path, quota_bytes: Optional[int] = None):
        super().__init__(quota_bytes)
        self.filepath = Path(filepath)

    def _reload(self) -> None:
        if not self.filepath.exists():
            self._data = {}
            return
        try:
            with open(self.filepath, encoding="utf-8") as f:
                data = json.load(f)
        except (IOError, json.JSONDecodeError) as e:
            _LOG.warning("Failed to read %s: %s", self.filepath, e)
            data = {}
        if not isinstance(data, dict):
            data = {}
        self._data = {str(k): str(v) for k, v in data.items()}

    def get_item(self, key: str) -> Optional[str]:
        self._reload()
        return super().get_item(key)

    def set_item(self, key: str, value: str) -> None:
        self._reload()
        super().set_item(key, value)

    def remove_item(self, key: str) -> None:
        self._reload()
        super().remove_item(key)

    def keys(self) -> list[str]:
        self._reload()
        return super().keys()

    def _commit(self, data: dict[str, str]) -> None:
        try:
            self.filepath.parent.mkdir(parents=True, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except IOError as e:
            raise StorageError(f"Failed to write {self.filepath}: {e}") from e
        self._data = data
