"""
Item operations shared by every generic route.

ItemService sits between the routers and the two stores. It owns the
cross-store rules: file metadata is written only after the bytes are stored,
and deleting a file removes the object before the record.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.errors import ConfigurationError, NotFoundError, StoreError, UploadError
from ..core.logger import get_logger
from ..db.collections import CollectionRegistry
from ..models.registry import ItemType
from .blob_store import S3_NOT_CONFIGURED, BlobStore, StoredObject

_logger = get_logger(__name__)


# PUBLIC_INTERFACE
class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    # The record is gone but its object could not be removed.
    OBJECT_ORPHANED = "object_orphaned"


# PUBLIC_INTERFACE
@dataclass
class DeleteResult:
    outcome: DeleteOutcome
    item_id: str
    orphaned_key: Optional[str] = None
    error: Optional[str] = None


# PUBLIC_INTERFACE
class ItemService:
    """CRUD, activity log and file flows over the collection registry."""

    def __init__(self, collections: CollectionRegistry, blob_store: BlobStore, activity_limit: int = 20):
        self._collections = collections
        self._blob_store = blob_store
        self._activity_limit = activity_limit

    # -- generic CRUD -----------------------------------------------------

    async def list_items(self, item_type: ItemType) -> List[Dict[str, Any]]:
        return await self._collections.for_type(item_type).list_all()

    async def create_item(self, item_type: ItemType, payload: Dict[str, Any]) -> Dict[str, Any]:
        store = self._collections.for_type(item_type)
        return await store.create(payload, item_id=payload.get("id"))

    async def update_item(self, item_type: ItemType, item_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        updated = await self._collections.for_type(item_type).update_by_id(item_id, patch)
        if updated is None:
            raise NotFoundError(item_id=item_id)
        return updated

    async def delete_item(self, item_type: ItemType, item_id: str) -> DeleteResult:
        """Delete a record; for files, delete the stored object first.

        The object delete is best-effort: if it fails the record is still
        deleted and the result reports OBJECT_ORPHANED with the failing key.
        """
        store = self._collections.for_type(item_type)
        item = await store.get_by_id(item_id)
        if item is None:
            raise NotFoundError(item_id=item_id)

        result = DeleteResult(outcome=DeleteOutcome.DELETED, item_id=item_id)
        key = item.get("filename") if item_type is ItemType.FILES else None
        if key:
            try:
                await self._blob_store.delete_object(key)
            except (StoreError, ConfigurationError) as exc:
                _logger.warning(
                    "Object delete failed; deleting metadata anyway.",
                    extra={"id": item_id, "key": key, "error": exc.message},
                )
                result = DeleteResult(
                    outcome=DeleteOutcome.OBJECT_ORPHANED,
                    item_id=item_id,
                    orphaned_key=key,
                    error=exc.message,
                )

        if not await store.delete_by_id(item_id):
            raise NotFoundError(item_id=item_id)
        return result

    # -- activity log -----------------------------------------------------

    async def recent_activity(self) -> List[Dict[str, Any]]:
        return await self._collections.activity.list_all(limit=self._activity_limit)

    async def record_activity(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        # Activity ids are always server generated.
        return await self._collections.activity.create(entry)

    async def clear_activity(self) -> int:
        deleted = await self._collections.activity.delete_all()
        _logger.info("Activity log cleared.", extra={"deleted": deleted})
        return deleted

    # -- files ------------------------------------------------------------

    async def store_upload_metadata(
        self,
        stored: Optional[StoredObject],
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Persist metadata for an object already written to the blob store.

        Fails before writing anything when storage is unconfigured or no file
        part was received.
        """
        if not self._blob_store.configured:
            raise ConfigurationError(S3_NOT_CONFIGURED)
        if stored is None:
            raise UploadError("No file uploaded.")

        fields = {
            "title": title or stored.original_name,
            "description": description or "",
            "path": stored.location,
            "filename": stored.key,
            "originalname": stored.original_name,
            "mimetype": stored.content_type,
            "size": stored.size,
        }
        return await self._collections.for_type(ItemType.FILES).create(fields)

    async def download_url(self, item_id: str, ttl_seconds: int = 60) -> str:
        item = await self._collections.for_type(ItemType.FILES).get_by_id(item_id)
        if item is None:
            raise NotFoundError("File not found", item_id=item_id)
        if not item.get("filename"):
            raise StoreError("File record has no stored object.")
        return await self._blob_store.signed_get_url(item["filename"], ttl_seconds=ttl_seconds)
