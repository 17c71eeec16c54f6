"""
Generic item routes.

One set of handlers serves every registered type. Each operation is exposed
twice, as ``/api/{type}`` and as ``/api/codes/{subtype}`` for the code kinds;
both forms resolve through the entity registry and share the same handler
body. The nested form is registered first so ``/api/codes/...`` is never read
as a flat type named "codes".

This router is mounted after the activity and file routers; a POST to
``/api/files/upload`` is therefore always served by the upload route and never
by the generic create.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Response

from ..api.deps import get_item_service
from ..models.registry import ItemType, resolve_code_subtype, resolve_type
from ..models.schemas import ErrorResponse
from ..services.items import DeleteOutcome, ItemService

router = APIRouter(prefix="/api", tags=["Items"])

_ERRORS = {404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


async def _list(item_type: ItemType, service: ItemService) -> List[Dict[str, Any]]:
    return await service.list_items(item_type)


async def _create(item_type: ItemType, payload: Dict[str, Any], service: ItemService) -> Dict[str, Any]:
    return await service.create_item(item_type, payload)


async def _update(
    item_type: ItemType, item_id: str, patch: Dict[str, Any], service: ItemService
) -> Dict[str, Any]:
    return await service.update_item(item_type, item_id, patch)


async def _delete(item_type: ItemType, item_id: str, service: ItemService) -> Response:
    result = await service.delete_item(item_type, item_id)
    response = Response(status_code=204)
    if result.outcome is DeleteOutcome.OBJECT_ORPHANED:
        response.headers["X-Blob-Status"] = "orphaned"
    return response


# ---------------------------------------------------------------------------
# Nested /api/codes/{subtype} form
# ---------------------------------------------------------------------------

# PUBLIC_INTERFACE
@router.get("/codes/{subtype}", summary="List code snippets", responses=_ERRORS)
async def list_codes(subtype: str, service: ItemService = Depends(get_item_service)) -> List[Dict[str, Any]]:
    return await _list(resolve_code_subtype(subtype), service)


# PUBLIC_INTERFACE
@router.post("/codes/{subtype}", status_code=201, summary="Create a code snippet", responses=_ERRORS)
async def create_code(
    subtype: str,
    payload: Dict[str, Any] = Body(...),
    service: ItemService = Depends(get_item_service),
) -> Dict[str, Any]:
    return await _create(resolve_code_subtype(subtype), payload, service)


# PUBLIC_INTERFACE
@router.put("/codes/{subtype}/{item_id}", summary="Update a code snippet", responses=_ERRORS)
async def update_code(
    subtype: str,
    item_id: str,
    patch: Dict[str, Any] = Body(...),
    service: ItemService = Depends(get_item_service),
) -> Dict[str, Any]:
    return await _update(resolve_code_subtype(subtype), item_id, patch, service)


# PUBLIC_INTERFACE
@router.delete("/codes/{subtype}/{item_id}", status_code=204, summary="Delete a code snippet", responses=_ERRORS)
async def delete_code(subtype: str, item_id: str, service: ItemService = Depends(get_item_service)) -> Response:
    return await _delete(resolve_code_subtype(subtype), item_id, service)


# ---------------------------------------------------------------------------
# Flat /api/{type} form
# ---------------------------------------------------------------------------

# PUBLIC_INTERFACE
@router.get(
    "/{item_type}",
    summary="List items",
    description="All records of a type, newest first.",
    responses=_ERRORS,
)
async def list_items(item_type: str, service: ItemService = Depends(get_item_service)) -> List[Dict[str, Any]]:
    return await _list(resolve_type(item_type), service)


# PUBLIC_INTERFACE
@router.post(
    "/{item_type}",
    status_code=201,
    summary="Create an item",
    description="Creates a record. The id is generated unless supplied; date is always set by the server.",
    responses=_ERRORS,
)
async def create_item(
    item_type: str,
    payload: Dict[str, Any] = Body(...),
    service: ItemService = Depends(get_item_service),
) -> Dict[str, Any]:
    return await _create(resolve_type(item_type), payload, service)


# PUBLIC_INTERFACE
@router.put(
    "/{item_type}/{item_id}",
    summary="Update an item",
    description="Merges the given fields into the record. id and date cannot be changed.",
    responses=_ERRORS,
)
async def update_item(
    item_type: str,
    item_id: str,
    patch: Dict[str, Any] = Body(...),
    service: ItemService = Depends(get_item_service),
) -> Dict[str, Any]:
    return await _update(resolve_type(item_type), item_id, patch, service)


# PUBLIC_INTERFACE
@router.delete(
    "/{item_type}/{item_id}",
    status_code=204,
    summary="Delete an item",
    description="Deletes the record. For files the stored object is deleted first (best-effort).",
    responses=_ERRORS,
)
async def delete_item(item_type: str, item_id: str, service: ItemService = Depends(get_item_service)) -> Response:
    return await _delete(resolve_type(item_type), item_id, service)
