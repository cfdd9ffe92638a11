"""Storage-facing file operations: list, upload, rename, delete."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Optional
from uuid import uuid4

from app.schemas import FileMetadata
from datastore.file_index import FileIndex, build_default_index
from models.records import FileType, SensorType
from services.classification import (
    file_type_from_name,
    infer_sensor_type,
    infer_sensor_type_from_content,
)
from storage.object_store import ObjectStore, build_default_store

logger = logging.getLogger(__name__)


class FileService:
    """Keeps blob storage and the metadata index in step."""

    def __init__(self, store: ObjectStore, index: FileIndex) -> None:
        self.store = store
        self.index = index

    def list_files(self) -> list[FileMetadata]:
        return sorted(self.index.scan(), key=lambda item: item.uploaded_at, reverse=True)

    def get(self, file_id: str) -> FileMetadata:
        metadata = self.index.get_item(file_id)
        if metadata is None:
            raise KeyError(f"File {file_id!r} not found.")
        return metadata

    def upload(self, data: bytes, name: Optional[str]) -> FileMetadata:
        """Store file bytes and register their metadata."""
        if not data:
            raise ValueError("Uploaded file is empty.")

        file_name = Path(name or "upload.csv").name
        file_id = str(uuid4())
        file_type = file_type_from_name(file_name)
        sensor_type = self._sensor_type_for(file_name, file_type, data)

        self.store.put_object(file_id, data)
        now = datetime.now(timezone.utc)
        metadata = FileMetadata(
            id=file_id,
            name=file_name,
            size=len(data),
            uploaded_at=now,
            modified_at=now,
            file_type=file_type,
            sensor_type=sensor_type,
            url=f"/files/{file_id}/content",
        )
        self.index.put_item(metadata)
        logger.info(
            "Stored uploaded file",
            extra={"file_id": file_id, "file_name": file_name, "status": "uploaded"},
        )
        return metadata

    def rename(self, file_id: str, new_name: str) -> FileMetadata:
        candidate = Path(new_name.strip()).name
        if not candidate:
            raise ValueError("New file name must not be empty.")

        metadata = self.get(file_id)
        sensor_type = metadata.sensor_type
        if sensor_type is SensorType.none:
            sensor_type = infer_sensor_type(candidate)
        renamed = metadata.model_copy(
            update={
                "name": candidate,
                "file_type": file_type_from_name(candidate),
                "sensor_type": sensor_type,
                "modified_at": datetime.now(timezone.utc),
            }
        )
        self.index.put_item(renamed)
        logger.info(
            "Renamed file", extra={"file_id": file_id, "file_name": candidate}
        )
        return renamed

    def delete(self, file_id: str) -> bool:
        removed = self.index.delete_item(file_id)
        if removed:
            self.store.delete_object(file_id)
            logger.info("Deleted file", extra={"file_id": file_id, "status": "deleted"})
        return removed

    def read_bytes(self, file_id: str) -> bytes:
        self.get(file_id)
        return self.store.get_object(file_id)

    def read_text(self, file_id: str) -> str:
        return self.read_bytes(file_id).decode("utf-8", errors="replace")

    @staticmethod
    def _sensor_type_for(name: str, file_type: FileType, data: bytes) -> SensorType:
        if file_type is FileType.csv:
            from_content = infer_sensor_type_from_content(
                data.decode("utf-8", errors="replace")
            )
            if from_content is not SensorType.none:
                return from_content
        return infer_sensor_type(name)


@lru_cache
def build_default_file_service() -> FileService:
    """Factory that wires the file service with the configured stores."""
    return FileService(store=build_default_store(), index=build_default_index())
