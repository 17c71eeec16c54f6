"""FastAPI dependencies resolving the per-application handles on app.state."""

from fastapi import Request

from ..core.config import Settings
from ..db.mongo import MongoStore
from ..services.blob_store import BlobStore
from ..services.items import ItemService


# PUBLIC_INTERFACE
def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# PUBLIC_INTERFACE
def get_item_service(request: Request) -> ItemService:
    return request.app.state.item_service


# PUBLIC_INTERFACE
def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


# PUBLIC_INTERFACE
def get_mongo(request: Request) -> MongoStore:
    return request.app.state.mongo
