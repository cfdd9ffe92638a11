"""Blob storage for uploaded files, keyed by file id."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, Optional

from settings import get_settings


class ObjectStore:
    """Stores raw file bytes in memory, or on disk under ``root_path`` when set.

    Keys are flat names; anything that could escape ``root_path`` is rejected.
    """

    def __init__(self, root_path: Optional[Path] = None) -> None:
        self.root_path = root_path
        self._memory: Dict[str, bytes] = {}
        self._lock = Lock()
        if root_path:
            root_path.mkdir(parents=True, exist_ok=True)

    def put_object(self, key: str, data: bytes) -> None:
        path = self._path_for(key)
        with self._lock:
            if path is None:
                self._memory[key] = data
            else:
                path.write_bytes(data)

    def get_object(self, key: str) -> bytes:
        path = self._path_for(key)
        with self._lock:
            if path is None:
                data = self._memory.get(key)
            else:
                data = path.read_bytes() if path.is_file() else None
        if data is None:
            raise KeyError(f"Object with key {key!r} not found.")
        return data

    def delete_object(self, key: str) -> bool:
        """Remove an object, returning whether anything was deleted."""
        path = self._path_for(key)
        with self._lock:
            if path is None:
                return self._memory.pop(key, None) is not None
            if not path.is_file():
                return False
            path.unlink()
            return True

    def list_objects(self) -> Iterable[str]:
        with self._lock:
            if self.root_path is None:
                return sorted(self._memory)
            return sorted(path.name for path in self.root_path.iterdir() if path.is_file())

    def _path_for(self, key: str) -> Optional[Path]:
        if not key or key in {".", ".."} or "/" in key or "\\" in key:
            raise ValueError(f"Invalid object key {key!r}.")
        if self.root_path is None:
            return None
        return self.root_path / key


@lru_cache
def build_default_store(root_path: Optional[str] = None) -> ObjectStore:
    settings = get_settings()
    store_root = settings.store_root_path if root_path is None else root_path
    return ObjectStore(root_path=Path(store_root) if store_root else None)
