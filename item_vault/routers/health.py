from fastapi import APIRouter, Depends, HTTPException

from ..api.deps import get_app_settings, get_blob_store, get_mongo
from ..core.config import Settings
from ..core.logger import get_logger
from ..db.mongo import MongoStore
from ..models.schemas import HealthResponse
from ..services.blob_store import BlobStore

router = APIRouter(prefix="/health", tags=["Health"])

_logger = get_logger(__name__)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=HealthResponse,
    summary="Service health",
    description=(
        "Liveness/health endpoint. Always returns 200 when the app is up. "
        "No database connections are attempted here."
    ),
    responses={
        200: {"description": "Service is healthy"},
    },
)
def get_health(
    settings: Settings = Depends(get_app_settings),
    blob_store: BlobStore = Depends(get_blob_store),
) -> HealthResponse:
    """
    Root health indicator used for liveness. Always returns 200 with {'status':'ok'}.
    Never touches MongoDB or S3; only reports which of them are configured.
    """
    _logger.info(
        "Health (no-DB) diagnostics",
        extra={
            "env": settings.APP_ENV,
            "mongodb_uri_set": bool((settings.MONGODB_URI or "").strip()),
            "s3_configured": blob_store.configured,
        },
    )
    return HealthResponse(status="ok")


# PUBLIC_INTERFACE
@router.get(
    "/db",
    response_model=HealthResponse,
    summary="Database connectivity",
    description="Pings MongoDB to confirm connectivity.",
    responses={
        200: {"description": "Database reachable"},
        503: {"description": "Database unavailable"},
    },
)
async def health_db(mongo: MongoStore = Depends(get_mongo)) -> HealthResponse:
    """Return 200 when MongoDB answers a ping, else 503."""
    if not mongo.configured:
        raise HTTPException(status_code=503, detail="database_unavailable: MONGODB_URI is not set")
    if not await mongo.ping():
        raise HTTPException(status_code=503, detail="database_unavailable: ping failed")
    _logger.info("DB connectivity OK via /health/db")
    return HealthResponse(status="ok")
