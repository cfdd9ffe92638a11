"""Unit tests for the storage-facing file service."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from datastore.file_index import FileIndex
from models.records import FileType, SensorType
from services.files import FileService
from storage.object_store import ObjectStore


@pytest.fixture()
def files(tmp_path: Path) -> FileService:
    return FileService(
        store=ObjectStore(root_path=tmp_path / "store"),
        index=FileIndex(persistence_path=tmp_path / "index.json"),
    )


def test_upload_stores_bytes_and_metadata(files: FileService) -> None:
    data = b"timestamp,temp,hum\n2024-01-01T00:00:00Z,10,50\n"

    metadata = files.upload(data, "greenhouse.csv")

    assert metadata.name == "greenhouse.csv"
    assert metadata.size == len(data)
    assert metadata.file_type is FileType.csv
    assert metadata.sensor_type is SensorType.dht22
    assert metadata.url == f"/files/{metadata.id}/content"
    assert files.read_bytes(metadata.id) == data
    assert files.get(metadata.id) == metadata


def test_upload_strips_directories_from_name(files: FileService) -> None:
    metadata = files.upload(b"x", "../../etc/light_log.txt")

    assert metadata.name == "light_log.txt"
    assert metadata.file_type is FileType.txt
    assert metadata.sensor_type is SensorType.ldr


def test_upload_rejects_empty_payload(files: FileService) -> None:
    with pytest.raises(ValueError, match="Uploaded file is empty."):
        files.upload(b"", "empty.csv")


def test_list_files_newest_first(files: FileService) -> None:
    first = files.upload(b"a", "first.csv")
    second = files.upload(b"b", "second.csv")
    files.index.put_item(
        first.model_copy(update={"uploaded_at": second.uploaded_at - timedelta(minutes=5)})
    )

    listed = [item.id for item in files.list_files()]

    assert listed == [second.id, first.id]


def test_rename_updates_name_and_type(files: FileService) -> None:
    metadata = files.upload(b"1,2\n", "data.csv")

    renamed = files.rename(metadata.id, "soil_moisture.json")

    assert renamed.name == "soil_moisture.json"
    assert renamed.file_type is FileType.json
    assert renamed.sensor_type is SensorType.soil
    assert renamed.modified_at >= metadata.modified_at
    assert files.get(metadata.id).name == "soil_moisture.json"


def test_rename_rejects_blank_name_and_unknown_file(files: FileService) -> None:
    metadata = files.upload(b"1", "data.csv")

    with pytest.raises(ValueError):
        files.rename(metadata.id, "   ")
    with pytest.raises(KeyError):
        files.rename("missing", "new.csv")


def test_delete_removes_file(files: FileService) -> None:
    metadata = files.upload(b"1", "data.csv")

    assert files.delete(metadata.id) is True
    assert files.delete(metadata.id) is False
    with pytest.raises(KeyError):
        files.get(metadata.id)
    with pytest.raises(KeyError):
        files.read_text(metadata.id)
