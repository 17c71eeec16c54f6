"""
File upload and download routes.

The upload's file part is written to the blob store by the ``stored_upload``
dependency before the route body runs; the route itself only records
metadata. Downloads never proxy bytes: they redirect to a signed URL.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import RedirectResponse

from ..api.deps import get_app_settings, get_blob_store, get_item_service
from ..core.config import Settings
from ..core.errors import PayloadTooLargeError
from ..core.logger import get_logger
from ..models.schemas import ErrorResponse
from ..services.blob_store import BlobStore, StoredObject
from ..services.items import ItemService

logger = get_logger(__name__)

UPLOAD_PATH = "/api/files/upload"

# Mounted before the generic item routes.
router = APIRouter(prefix="/api/files", tags=["Files"])


async def stored_upload(
    file: Optional[UploadFile] = File(default=None, description="The file to store."),
    settings: Settings = Depends(get_app_settings),
    blob_store: BlobStore = Depends(get_blob_store),
) -> Optional[StoredObject]:
    """Put the multipart ``file`` part into the blob store, if one was sent."""
    if file is None:
        return None
    if file.size is not None and file.size > settings.UPLOAD_MAX_BYTES:
        raise PayloadTooLargeError(f"File too large: limit is {settings.UPLOAD_MAX_BYTES} bytes.")
    try:
        return await blob_store.put_object(file.file, file.filename or "unnamed", file.content_type)
    finally:
        await file.close()


# PUBLIC_INTERFACE
@router.post(
    "/upload",
    status_code=201,
    summary="Upload a file",
    description="Multipart upload (field 'file', optional 'title' and 'description'). Stores the "
    "bytes in object storage and returns the created file record.",
    responses={413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_file(
    title: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    stored: Optional[StoredObject] = Depends(stored_upload),
    service: ItemService = Depends(get_item_service),
) -> Dict[str, Any]:
    return await service.store_upload_metadata(stored, title=title, description=description)


# PUBLIC_INTERFACE
@router.get(
    "/download/{item_id}",
    status_code=302,
    summary="Download a file",
    description="Redirects (302) to a time-limited signed URL of the stored object.",
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def download_file(
    item_id: str,
    settings: Settings = Depends(get_app_settings),
    service: ItemService = Depends(get_item_service),
) -> RedirectResponse:
    url = await service.download_url(item_id, ttl_seconds=settings.SIGNED_URL_TTL_SECONDS)
    return RedirectResponse(url, status_code=302)
