from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Response

from ..api.deps import get_item_service
from ..models.schemas import ActivityIn, ErrorResponse
from ..services.items import ItemService

# Mounted before the generic item routes so /api/activity is never read as a type.
router = APIRouter(prefix="/api/activity", tags=["Activity"])


# PUBLIC_INTERFACE
@router.get(
    "",
    summary="Recent activity",
    description="Returns the most recent activity entries (20 by default), newest first.",
    responses={500: {"model": ErrorResponse}},
)
async def list_activity(service: ItemService = Depends(get_item_service)) -> List[Dict[str, Any]]:
    return await service.recent_activity()


# PUBLIC_INTERFACE
@router.post(
    "",
    status_code=201,
    summary="Record activity",
    description="Append one entry to the activity log. id and date are set by the server.",
    responses={500: {"model": ErrorResponse}},
)
async def create_activity(
    payload: ActivityIn,
    service: ItemService = Depends(get_item_service),
) -> Dict[str, Any]:
    return await service.record_activity(payload.model_dump())


# PUBLIC_INTERFACE
@router.delete(
    "",
    status_code=204,
    summary="Clear activity",
    description="Delete every activity entry.",
    responses={500: {"model": ErrorResponse}},
)
async def clear_activity(service: ItemService = Depends(get_item_service)) -> Response:
    await service.clear_activity()
    return Response(status_code=204)
