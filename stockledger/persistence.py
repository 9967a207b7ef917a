"""
Snapshot persistence.

The whole database image is kept under one key of a small key-value store,
encoded as a JSON array of byte values. Every save replaces the entry; there
is no incremental write.
"""

import json
import os
import tempfile

from stockledger.exceptions import CorruptSnapshotError
from stockledger.logging_config import get_logger

logger = get_logger("persistence")


class MemoryBackend:
    """Process-local key-value store."""

    def __init__(self, initial: dict | None = None):
        self.items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.items.get(key)

    def set(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileBackend:
    """Key-value store kept in a single JSON object on disk."""

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise CorruptSnapshotError(self.path, f"invalid JSON file: {e}") from e
        if not isinstance(data, dict):
            raise CorruptSnapshotError(self.path, "store file is not a JSON object")
        return data

    def _write(self, data: dict) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp, self.path)
        except OSError:
            os.unlink(tmp)
            raise

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except CorruptSnapshotError:
            data = {}
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        try:
            data = self._read()
        except CorruptSnapshotError:
            data = {}
        data.pop(key, None)
        self._write(data)


def encode_image(data: bytes) -> str:
    return json.dumps(list(data), separators=(",", ":"))


def decode_image(text: str, key: str = "image") -> bytes:
    try:
        values = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise CorruptSnapshotError(key, f"not JSON: {e}") from e
    if not isinstance(values, list):
        raise CorruptSnapshotError(key, "expected an array of byte values")
    try:
        return bytes(values)
    except (TypeError, ValueError) as e:
        raise CorruptSnapshotError(key, f"bad byte value: {e}") from e


class SnapshotStore:
    """Load and save the database image under a fixed key."""

    def __init__(self, backend, key: str = "materialsDB"):
        self.backend = backend
        self.key = key

    def load(self) -> bytes | None:
        text = self.backend.get(self.key)
        if text is None:
            return None
        return decode_image(text, self.key)

    def save(self, data: bytes) -> None:
        self.backend.set(self.key, encode_image(data))
        logger.debug("snapshot_saved", extra={"key": self.key, "size": len(data)})

    def clear(self) -> None:
        self.backend.remove(self.key)
        logger.info("snapshot_cleared", extra={"key": self.key})
