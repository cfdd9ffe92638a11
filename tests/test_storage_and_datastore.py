from datetime import datetime, timezone
import json
from pathlib import Path

import pytest

from app.schemas import FileMetadata
from datastore.file_index import FileIndex
from models.records import FileType, SensorType
from storage.object_store import ObjectStore


def _metadata(file_id: str = "file-123", name: str = "readings.csv") -> FileMetadata:
    stamp = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    return FileMetadata(
        id=file_id,
        name=name,
        size=42,
        uploaded_at=stamp,
        modified_at=stamp,
        file_type=FileType.csv,
        sensor_type=SensorType.dht22,
    )


def test_object_store_put_and_get(tmp_path: Path) -> None:
    store = ObjectStore(root_path=tmp_path)
    store.put_object("file.txt", b"hello")

    assert (tmp_path / "file.txt").read_bytes() == b"hello"
    assert "file.txt" in store.list_objects()

    fresh_store = ObjectStore(root_path=tmp_path)
    assert fresh_store.get_object("file.txt") == b"hello"


def test_object_store_missing_key(tmp_path: Path) -> None:
    store = ObjectStore(root_path=tmp_path)

    with pytest.raises(KeyError, match="missing.txt"):
        store.get_object("missing.txt")


def test_object_store_delete(tmp_path: Path) -> None:
    store = ObjectStore(root_path=tmp_path)
    store.put_object("gone.csv", b"data")

    assert store.delete_object("gone.csv") is True
    assert not (tmp_path / "gone.csv").exists()
    assert "gone.csv" not in store.list_objects()
    assert store.delete_object("gone.csv") is False


def test_in_memory_object_store() -> None:
    store = ObjectStore()
    store.put_object("a", b"1")

    assert store.get_object("a") == b"1"
    assert store.delete_object("a") is True
    with pytest.raises(KeyError):
        store.get_object("a")
    assert list(store.list_objects()) == []


def test_file_index_round_trip_returns_deep_copy() -> None:
    index = FileIndex()
    original = _metadata()

    index.put_item(original)
    fetched = index.get_item(original.id)

    assert fetched == original
    assert fetched is not original

    fetched.name = "changed.csv"
    assert index.get_item(original.id).name == "readings.csv"  # type: ignore[union-attr]


def test_file_index_missing_and_delete() -> None:
    index = FileIndex()
    index.put_item(_metadata())

    assert index.get_item("missing-id") is None
    assert index.delete_item("file-123") is True
    assert index.delete_item("file-123") is False
    assert index.scan() == []


def test_file_index_persists_to_disk_and_reloads(tmp_path: Path) -> None:
    path = tmp_path / "index.json"
    index = FileIndex(persistence_path=path)
    item = _metadata()

    index.put_item(item)

    payload = json.loads(path.read_text())
    assert payload[item.id]["file_type"] == "CSV"
    assert payload[item.id]["sensor_type"] == "DHT22"

    reloaded = FileIndex(persistence_path=path).get_item(item.id)
    assert reloaded == item


def test_file_index_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "index.json"
    path.write_text("{not json")

    index = FileIndex(persistence_path=path)

    assert index.scan() == []


def test_file_index_scan_returns_all_items() -> None:
    index = FileIndex()
    index.put_item(_metadata(file_id="file-1"))
    index.put_item(_metadata(file_id="file-2"))

    scanned = sorted(item.id for item in index.scan())

    assert scanned == ["file-1", "file-2"]


def test_object_store_rejects_keys_outside_root(tmp_path: Path) -> None:
    store = ObjectStore(root_path=tmp_path / "store")

    for key in ("../escape", "nested/key", "..", ""):
        with pytest.raises(ValueError):
            store.put_object(key, b"x")

    assert list(store.list_objects()) == []
    assert not (tmp_path / "escape").exists()


def test_file_index_ignores_non_object_payload(tmp_path: Path) -> None:
    path = tmp_path / "index.json"
    path.write_text("[]")

    index = FileIndex(persistence_path=path)
    assert index.scan() == []

    index.put_item(_metadata())
    assert json.loads(path.read_text())["file-123"]["name"] == "readings.csv"
