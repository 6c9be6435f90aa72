"""Tests for the complaint store and upload storage."""
import io
import re
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from civicfix.errors import StorageError, UploadError
from civicfix.services.complaint import ComplaintStore
from civicfix.services.uploads import UploadStorage

FIELDS = {
    "name": "A",
    "email": "a@x.com",
    "phone": "1",
    "category": "Pothole",
    "description": "Big hole",
    "location": "Main St",
}


@pytest.fixture
def store(tmp_path):
    s = ComplaintStore(tmp_path / "database.sqlite")
    s.open()
    yield s
    s.close()


def test_insert_defaults(store):
    complaint_id = store.insert(FIELDS)
    [row] = store.list_all()
    assert row.id == complaint_id
    assert row.status == "Pending"
    assert row.image_paths is None
    assert re.match(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", row.created_at)


def test_insert_ignores_unknown_fields(store):
    store.insert({"category": "Graffiti", "status": "Resolved", "id": 42})
    [row] = store.list_all()
    assert row.category == "Graffiti"
    assert row.status == "Pending"
    assert row.id != 42
    assert row.name is None


def test_insert_joins_image_paths(store):
    store.insert(FIELDS, ["/uploads/1-a.jpg", "/uploads/2-b.jpg"])
    [row] = store.list_all()
    assert row.image_paths == "/uploads/1-a.jpg,/uploads/2-b.jpg"
    assert row.image_paths.split(",") == ["/uploads/1-a.jpg", "/uploads/2-b.jpg"]
    assert row.to_dict()["imagePaths"] == row.image_paths


def test_insert_rejects_more_than_three_images(store):
    with pytest.raises(StorageError):
        store.insert(FIELDS, [f"/uploads/{i}.jpg" for i in range(4)])
    assert store.list_all() == []


def test_ids_increase_and_list_is_newest_first(store):
    ids = [store.insert(FIELDS) for _ in range(3)]
    assert ids[0] < ids[1] < ids[2]
    assert [row.id for row in store.list_all()] == list(reversed(ids))


def test_update_status_changes_only_status(store):
    first = store.insert(FIELDS)
    second = store.insert({**FIELDS, "category": "Streetlight"})
    before = {row.id: row.to_dict() for row in store.list_all()}

    assert store.update_status(first, "Resolved") is True

    after = {row.id: row.to_dict() for row in store.list_all()}
    assert after[first] == {**before[first], "status": "Resolved"}
    assert after[second] == before[second]


def test_update_status_unknown_id_is_noop(store):
    store.insert(FIELDS)
    before = [row.to_dict() for row in store.list_all()]
    assert store.update_status(999, "Resolved") is True
    assert [row.to_dict() for row in store.list_all()] == before


def test_reopen_keeps_rows(tmp_path):
    path = tmp_path / "database.sqlite"
    s = ComplaintStore(path)
    s.open()
    s.insert(FIELDS)
    s.close()

    s = ComplaintStore(path)
    s.open()
    s.open()
    assert len(s.list_all()) == 1
    assert s.insert(FIELDS) == 2
    s.close()


def test_closed_store_raises(tmp_path):
    s = ComplaintStore(tmp_path / "database.sqlite")
    with pytest.raises(StorageError):
        s.insert(FIELDS)
    with pytest.raises(StorageError):
        s.list_all()
    with pytest.raises(StorageError):
        s.update_status(1, "Resolved")


def test_stored_name_strips_client_directories():
    assert UploadStorage.stored_name("photo.jpg", now=1.5) == "1500-photo.jpg"
    assert UploadStorage.stored_name("C:\\Users\\me\\photo.jpg", now=2) == "2000-photo.jpg"
    assert UploadStorage.stored_name("../../etc/passwd", now=0) == "0-passwd"
    assert UploadStorage.stored_name(None, now=0) == "0-upload"


def test_stored_name_drops_unsafe_characters():
    assert UploadStorage.stored_name("IMG_1, front.jpg", now=0) == "0-IMG_1_front.jpg"
    assert UploadStorage.stored_name("pothole#2.jpg", now=0) == "0-pothole2.jpg"
    assert UploadStorage.stored_name("50% off?.png", now=0) == "0-50_off.png"
    assert UploadStorage.stored_name("..", now=0) == "0-upload"


def test_save_writes_stream_under_uploads(tmp_path):
    uploads = UploadStorage(tmp_path / "uploads")
    uploads.ensure()
    path = uploads.save("hole.jpg", io.BytesIO(b"jpeg-bytes"))
    assert path.startswith("/uploads/")
    assert path.endswith("-hole.jpg")
    stored = tmp_path / "uploads" / path.rsplit("/", 1)[1]
    assert stored.read_bytes() == b"jpeg-bytes"


def test_save_into_missing_directory(tmp_path):
    uploads = UploadStorage(tmp_path / "missing")
    with pytest.raises(UploadError):
        uploads.save("hole.jpg", io.BytesIO(b"x"))


def test_metrics_period_zero_is_not_default(monkeypatch):
    from civicfix.utils import metrics as metrics_module

    clock = {"now": 1000.0}
    monkeypatch.setattr(metrics_module.time, "time", lambda: clock["now"])
    collector = metrics_module.MetricsCollector("complaint")
    collector.increment("complaints_created")

    clock["now"] = 1030.0
    assert collector.get_all_metrics(time_period_minutes=0)["time_series"]["complaints_created"] == []
    assert len(collector.get_all_metrics()["time_series"]["complaints_created"]) == 1
    assert collector.get_all_metrics(time_period_minutes=0)["counters"]["complaints_created"] == 1
