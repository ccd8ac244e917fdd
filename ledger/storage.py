"""
Blob storage collaborator.

The ledger never manages a database; it hands whole JSON snapshots to a
key-value store and reads them back once at startup.
"""
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A blob could not be read, decoded or written."""


class BlobStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, blob: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._blobs: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def put(self, key: str, blob: str) -> None:
        self._blobs[key] = blob

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)


class JsonFileStore:
    """One ``<key>.json`` file per blob under ``folder``."""

    def __init__(self, folder: Path):
        self.folder = Path(folder)

    def _path(self, key: str) -> Path:
        return self.folder / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot read {path}: {exc}") from exc

    def put(self, key: str, blob: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(blob, encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            raise StorageError(f"Cannot write {path}: {exc}") from exc
        logger.debug("Wrote %s (%d bytes)", path, len(blob))

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot delete {path}: {exc}") from exc
        logger.debug("Deleted %s", path)
