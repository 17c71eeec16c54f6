"""
Uniform CRUD adapter over MongoDB collections.

Records are addressed by their external ``id`` field, which carries a unique
index in every collection. The MongoDB ``_id`` is used only as a tiebreaker
for ordering and is never returned.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type

from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import ConnectionFailure, DuplicateKeyError, PyMongoError

from ..core.errors import StoreError
from ..core.ids import generate_id
from ..core.logger import get_logger
from ..models.registry import ACTIVITY_COLLECTION, ACTIVITY_SCHEMA, ItemType
from ..models.schemas import ItemBase, required_fields, shape_fields
from .mongo import MongoStore

_logger = get_logger(__name__)

_NO_MONGO_ID = {"_id": 0}
_NEWEST_FIRST = [("date", DESCENDING), ("_id", DESCENDING)]


def _now() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
class CollectionStore:
    """find-all-sorted, find-one, create, update and delete for one collection."""

    def __init__(self, mongo: MongoStore, name: str, schema: Type[ItemBase]):
        self._mongo = mongo
        self.name = name
        self.schema = schema
        self._indexed = False

    async def _collection(self):
        coll = await self._mongo.collection(self.name)
        if not self._indexed:
            try:
                await coll.create_index("id", unique=True)
            except PyMongoError as exc:
                raise self._store_error("create_index", exc) from exc
            self._indexed = True
        return coll

    def _store_error(self, op: str, exc: PyMongoError) -> StoreError:
        if isinstance(exc, ConnectionFailure):
            self._mongo.mark_stale()
        _logger.error(
            "MongoDB operation failed.",
            exc_info=exc,
            extra={"collection": self.name, "operation": op},
        )
        return StoreError(f"Database error: {exc}")

    async def list_all(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Return every record, newest first; at most limit records if given."""
        coll = await self._collection()
        try:
            cursor = coll.find({}, _NO_MONGO_ID).sort(_NEWEST_FIRST)
            if limit is not None:
                cursor = cursor.limit(limit)
            return await cursor.to_list(length=None)
        except PyMongoError as exc:
            raise self._store_error("list_all", exc) from exc

    async def get_by_id(self, item_id: str) -> Optional[Dict[str, Any]]:
        coll = await self._collection()
        try:
            return await coll.find_one({"id": item_id}, _NO_MONGO_ID)
        except PyMongoError as exc:
            raise self._store_error("get_by_id", exc) from exc

    async def create(self, fields: Dict[str, Any], item_id: Optional[Any] = None) -> Dict[str, Any]:
        """Insert a record built from the recognized fields of ``fields``.

        The id is ``item_id`` as a string when given, otherwise a generated
        one. ``date`` is always the current time. Required fields must be
        present, and an id already in the collection is rejected.
        """
        doc = shape_fields(self.schema, fields)
        missing = [name for name in required_fields(self.schema) if doc.get(name) in (None, "")]
        if missing:
            raise StoreError(
                f"{self.name} validation failed: "
                + ", ".join(f"{name} is required" for name in missing)
            )
        # Path segments are strings; a numeric id would be unreachable.
        doc["id"] = generate_id() if item_id in (None, "") else str(item_id)
        doc["date"] = _now()

        coll = await self._collection()
        try:
            await coll.insert_one(doc)
        except DuplicateKeyError as exc:
            _logger.warning("Duplicate id rejected.", extra={"collection": self.name, "id": doc["id"]})
            raise StoreError(f"{self.name} validation failed: id {doc['id']} already exists") from exc
        except PyMongoError as exc:
            raise self._store_error("create", exc) from exc
        doc.pop("_id", None)
        return doc

    async def update_by_id(self, item_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Shallow-merge the recognized fields of patch into the record.

        ``id`` and ``date`` are never overwritten. Returns the updated record,
        or None when no record has that id.
        """
        changes = shape_fields(self.schema, patch)
        if not changes:
            return await self.get_by_id(item_id)

        coll = await self._collection()
        try:
            return await coll.find_one_and_update(
                {"id": item_id},
                {"$set": changes},
                projection=_NO_MONGO_ID,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise self._store_error("update_by_id", exc) from exc

    async def delete_by_id(self, item_id: str) -> bool:
        coll = await self._collection()
        try:
            result = await coll.delete_one({"id": item_id})
        except PyMongoError as exc:
            raise self._store_error("delete_by_id", exc) from exc
        return result.deleted_count > 0

    async def delete_all(self) -> int:
        coll = await self._collection()
        try:
            result = await coll.delete_many({})
        except PyMongoError as exc:
            raise self._store_error("delete_all", exc) from exc
        return result.deleted_count


# PUBLIC_INTERFACE
class CollectionRegistry:
    """One CollectionStore per ItemType plus the activity log."""

    def __init__(self, mongo: MongoStore):
        self._stores = {
            item_type: CollectionStore(mongo, item_type.collection_name, item_type.schema)
            for item_type in ItemType
        }
        self.activity = CollectionStore(mongo, ACTIVITY_COLLECTION, ACTIVITY_SCHEMA)

    def for_type(self, item_type: ItemType) -> CollectionStore:
        return self._stores[item_type]
