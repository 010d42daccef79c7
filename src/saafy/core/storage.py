"""Tolerant key/value persistence.

Values are stored as small JSON blobs wrapped with a write timestamp and an
optional expiry. Reads never raise: missing, expired or corrupt entries come
back as the caller's default, and corrupt entries are removed.

Two stores share the same contract:
- JsonFileStore: durable, one file per key under the data directory
- MemoryStore: session-scoped, discarded with the process
"""

import json
import os
import re
import time
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from loguru import logger

KEY_PREFIX = "saafy_"
MAX_ITEM_SIZE = 1024 * 1024  # 1MB per serialized item

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageReadError(Exception):
    """Raised when a stored value cannot be decoded."""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Unreadable value for {key!r}: {reason}")


class KeyValueStore:
    """Base class: wrapping, expiry and corruption recovery.

    Subclasses implement the raw string operations.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    # Raw backend operations
    def _read_raw(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write_raw(self, key: str, data: str) -> None:
        raise NotImplementedError

    def _delete_raw(self, key: str) -> None:
        raise NotImplementedError

    def _raw_keys(self) -> Iterator[str]:
        raise NotImplementedError

    def _full_key(self, key: str) -> str:
        if not key or not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return KEY_PREFIX + key

    def _decode(self, key: str, raw: str) -> tuple[Any, bool]:
        """Decode a raw blob into (value, expired).

        Raises:
            StorageReadError: If the blob is not valid JSON
        """
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise StorageReadError(key, str(e)) from e

        if isinstance(parsed, dict) and "_value" in parsed:
            expires = parsed.get("_expires")
            if expires is not None:
                if not isinstance(expires, (int, float)):
                    raise StorageReadError(key, "non-numeric expiry")
                if self._clock() > expires:
                    return None, True
            return parsed["_value"], False

        # Unwrapped values written by older versions are returned as-is
        return parsed, False

    def get(self, key: str, default: Any = None) -> Any:
        """Read a value, falling back to default on any problem."""
        full_key = self._full_key(key)
        try:
            raw = self._read_raw(full_key)
        except OSError as e:
            logger.warning(f"Storage read failed for {key!r}: {e}")
            return default

        if raw is None:
            return default

        try:
            value, expired = self._decode(key, raw)
        except StorageReadError as e:
            logger.warning(f"{e}; discarding")
            self.remove(key)
            return default

        if expired:
            self.remove(key)
            return default
        return value

    def set(self, key: str, value: Any, expires_in: Optional[float] = None) -> bool:
        """Store a value. Returns False if it could not be written.

        Args:
            key: Storage key (without prefix)
            value: JSON-serializable value
            expires_in: Optional lifetime in seconds
        """
        full_key = self._full_key(key)
        now = self._clock()
        wrapper: dict[str, Any] = {"_value": value, "_timestamp": int(now * 1000)}
        if expires_in:
            wrapper["_expires"] = now + expires_in

        try:
            serialized = json.dumps(wrapper, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning(f"Refusing to store unserializable value for {key!r}: {e}")
            return False

        if len(serialized.encode("utf-8")) > MAX_ITEM_SIZE:
            logger.warning(f"Storage item {key!r} exceeds size limit")
            return False

        try:
            self._write_raw(full_key, serialized)
        except OSError as e:
            logger.warning(f"Storage write failed for {key!r}: {e}")
            return False
        return True

    def remove(self, key: str) -> None:
        try:
            self._delete_raw(self._full_key(key))
        except OSError as e:
            logger.warning(f"Storage remove failed for {key!r}: {e}")

    def keys(self) -> list[str]:
        """Keys currently stored, without prefix."""
        return sorted(k[len(KEY_PREFIX):] for k in self._raw_keys())

    def clear(self) -> None:
        """Remove every saafy key from this store."""
        for key in self.keys():
            self.remove(key)


class MemoryStore(KeyValueStore):
    """Session-scoped store held in memory."""

    def __init__(self, clock: Callable[[], float] = time.time):
        super().__init__(clock)
        self._data: dict[str, str] = {}

    def _read_raw(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def _write_raw(self, key: str, data: str) -> None:
        self._data[key] = data

    def _delete_raw(self, key: str) -> None:
        self._data.pop(key, None)

    def _raw_keys(self) -> Iterator[str]:
        return iter(list(self._data))


class JsonFileStore(KeyValueStore):
    """Durable store: one JSON file per key."""

    def __init__(self, directory: Path, clock: Callable[[], float] = time.time):
        super().__init__(clock)
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _read_raw(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            # Surfaces as a corrupt entry in get()
            return "\x00"

    def _write_raw(self, key: str, data: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(data, encoding="utf-8")
        os.replace(tmp_path, path)

    def _delete_raw(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def _raw_keys(self) -> Iterator[str]:
        if not self.directory.exists():
            return iter(())
        return (
            p.stem
            for p in self.directory.glob(f"{KEY_PREFIX}*.json")
            if p.is_file()
        )
