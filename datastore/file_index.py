from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Optional

from pydantic import ValidationError

from app.schemas import FileMetadata
from settings import get_settings

logger = logging.getLogger(__name__)


class FileIndex:
    """Metadata records for stored files, keyed by file id."""

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self._items: Dict[str, FileMetadata] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def put_item(self, item: FileMetadata) -> None:
        with self._lock:
            self._items[item.id] = item.model_copy(deep=True)
            self._persist()

    def get_item(self, key: str) -> Optional[FileMetadata]:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            return item.model_copy(deep=True)

    def delete_item(self, key: str) -> bool:
        with self._lock:
            removed = self._items.pop(key, None) is not None
            if removed:
                self._persist()
            return removed

    def scan(self) -> list[FileMetadata]:
        """Return deep copies of all stored metadata records."""

        with self._lock:
            return [item.model_copy(deep=True) for item in self._items.values()]

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {
            file_id: item.model_dump(mode="json") for file_id, item in self._items.items()
        }
        # Write then rename so readers never see a half-written index.
        staging = self.persistence_path.with_suffix(self.persistence_path.suffix + ".tmp")
        staging.write_text(json.dumps(payload, indent=2, sort_keys=True))
        staging.replace(self.persistence_path)

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.warning(
                "Ignoring unreadable file index at %s", self.persistence_path
            )
            data = {}

        if not isinstance(data, dict):
            logger.warning(
                "Ignoring file index at %s: expected a JSON object", self.persistence_path
            )
            data = {}

        for file_id, payload in data.items():
            try:
                self._items[file_id] = FileMetadata.model_validate(payload)
            except ValidationError:
                logger.warning(
                    "Dropping invalid file index entry",
                    extra={"file_id": file_id, "reason": "validation error"},
                )


@lru_cache
def build_default_index(path: Optional[str] = None) -> FileIndex:
    settings = get_settings()
    index_path = settings.metadata_path if path is None else path
    persistence = Path(index_path) if index_path else None
    return FileIndex(persistence_path=persistence)
