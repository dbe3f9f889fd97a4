"""Key-value stores holding serialized gradebooks."""

from pathlib import Path
from typing import Protocol

from ..errors import StoreError
from ..utils.files import safe_filename, write_atomic
from ..utils.logging import get_logger

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """Minimal persistence port: opaque bytes under string keys."""

    def get(self, key: str) -> bytes | None: ...

    def put(self, key: str, value: bytes) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """Dictionary-backed store."""

    def __init__(self):
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileStore:
    """One ``<key>.json`` file per key inside a directory."""

    def __init__(self, directory: Path):
        self.directory = directory

    def _path(self, key: str) -> Path:
        return self.directory / f"{safe_filename(key)}.json"

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise StoreError(f"Cannot read {path}: {e}") from e

    def put(self, key: str, value: bytes) -> None:
        path = self._path(key)
        try:
            write_atomic(path, value)
        except OSError as e:
            raise StoreError(f"Cannot write {path}: {e}") from e
        logger.debug(f"Saved {len(value)} bytes to {path}")

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
