"""Unit tests for ItemService: two-phase file delete and upload preconditions."""

import io

import pytest

from item_vault.core.errors import ConfigurationError, NotFoundError, StoreError, UploadError
from item_vault.db.collections import CollectionRegistry
from item_vault.models.registry import ItemType
from item_vault.services.blob_store import BlobStore, StoredObject
from item_vault.services.items import DeleteOutcome, ItemService


class RecordingBlobStore(BlobStore):
    """Blob store double that records deletes and can be told to fail."""

    configured = True

    def __init__(self, fail_delete: bool = False):
        self.fail_delete = fail_delete
        self.deleted = []

    async def put_object(self, fileobj, suggested_name, content_type=None):
        data = fileobj.read()
        return StoredObject(
            key=f"uploads/1-{suggested_name}",
            location=f"https://bucket/uploads/1-{suggested_name}",
            size=len(data),
            content_type=content_type,
            original_name=suggested_name,
        )

    async def signed_get_url(self, key, ttl_seconds=60):
        return f"https://signed/{key}?ttl={ttl_seconds}"

    async def delete_object(self, key):
        if self.fail_delete:
            raise StoreError("S3 delete failed: AccessDenied")
        self.deleted.append(key)


@pytest.fixture
def blob_store():
    return RecordingBlobStore()


@pytest.fixture
def service(mongo, blob_store):
    return ItemService(CollectionRegistry(mongo), blob_store, activity_limit=20)


async def _uploaded(service, blob_store, name="a.txt"):
    stored = await blob_store.put_object(io.BytesIO(b"abc"), name, "text/plain")
    return await service.store_upload_metadata(stored)


@pytest.mark.unit
class TestDelete:

    async def test_file_delete_removes_object_then_record(self, service, blob_store):
        record = await _uploaded(service, blob_store)
        result = await service.delete_item(ItemType.FILES, record["id"])

        assert result.outcome is DeleteOutcome.DELETED
        assert blob_store.deleted == [record["filename"]]
        assert await service.list_items(ItemType.FILES) == []

    async def test_failed_object_delete_still_deletes_record(self, service, blob_store):
        record = await _uploaded(service, blob_store)
        blob_store.fail_delete = True

        result = await service.delete_item(ItemType.FILES, record["id"])

        assert result.outcome is DeleteOutcome.OBJECT_ORPHANED
        assert result.orphaned_key == record["filename"]
        assert "AccessDenied" in result.error
        assert await service.list_items(ItemType.FILES) == []

    async def test_non_file_delete_never_touches_blob_store(self, service, blob_store):
        note = await service.create_item(ItemType.NOTES, {"title": "t", "filename": "ignored"})
        result = await service.delete_item(ItemType.NOTES, note["id"])
        assert result.outcome is DeleteOutcome.DELETED
        assert blob_store.deleted == []

    async def test_missing_record_raises_before_any_delete(self, service, blob_store):
        with pytest.raises(NotFoundError):
            await service.delete_item(ItemType.FILES, "missing")
        assert blob_store.deleted == []


@pytest.mark.unit
class TestUploadMetadata:

    async def test_defaults_title_and_description(self, service, blob_store):
        record = await _uploaded(service, blob_store, name="photo.png")
        assert record["title"] == "photo.png"
        assert record["description"] == ""
        assert record["originalname"] == "photo.png"
        assert record["filename"] == "uploads/1-photo.png"
        assert record["path"] == "https://bucket/uploads/1-photo.png"
        assert record["mimetype"] == "text/plain"
        assert record["size"] == 3

    async def test_missing_file_creates_nothing(self, service):
        with pytest.raises(UploadError, match="No file uploaded"):
            await service.store_upload_metadata(None, title="t")
        assert await service.list_items(ItemType.FILES) == []

    async def test_unconfigured_storage_creates_nothing(self, mongo):
        blob_store = RecordingBlobStore()
        blob_store.configured = False
        service = ItemService(CollectionRegistry(mongo), blob_store)
        stored = await blob_store.put_object(io.BytesIO(b"x"), "x.txt")

        with pytest.raises(ConfigurationError, match="AWS S3 not configured"):
            await service.store_upload_metadata(stored)
        assert await service.list_items(ItemType.FILES) == []


@pytest.mark.unit
class TestDownloadAndUpdate:

    async def test_download_url_uses_stored_key(self, service, blob_store):
        record = await _uploaded(service, blob_store)
        url = await service.download_url(record["id"], ttl_seconds=60)
        assert url == f"https://signed/{record['filename']}?ttl=60"

    async def test_download_missing_file(self, service):
        with pytest.raises(NotFoundError, match="File not found"):
            await service.download_url("missing")

    async def test_update_missing_raises(self, service):
        with pytest.raises(NotFoundError):
            await service.update_item(ItemType.NOTES, "missing", {"title": "x"})

    async def test_activity_limit(self, service):
        for i in range(25):
            await service.record_activity({"action": "created", "itemType": "notes", "itemName": f"n{i}"})
        recent = await service.recent_activity()
        assert len(recent) == 20
        assert recent[0]["itemName"] == "n24"
        assert recent[-1]["itemName"] == "n5"
        assert await service.clear_activity() == 25
        assert await service.recent_activity() == []
