from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from ..core.config import Settings, get_settings
from ..core.errors import install_error_handlers
from ..core.logger import get_logger
from ..core.middleware import RequestSizeLimitMiddleware
from ..db.collections import CollectionRegistry
from ..db.mongo import MongoStore
from ..routers.activity import router as activity_router
from ..routers.files import UPLOAD_PATH, router as files_router
from ..routers.health import router as health_router
from ..routers.items import router as items_router
from ..services.blob_store import BlobStore, build_blob_store
from ..services.items import ItemService

logger = get_logger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    logger.info("Startup complete.", extra={"mongodb_configured": app.state.mongo.configured})
    yield
    # The Mongo client is created lazily; close it only if a request opened it.
    app.state.mongo.close()
    logger.info("Shutdown complete.")


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    mongo: Optional[MongoStore] = None,
    blob_store: Optional[BlobStore] = None,
) -> FastAPI:
    """Build the FastAPI application.

    The store handles are constructed here once and kept on ``app.state``;
    routes reach them through the dependencies in api/deps.py. Passing them in
    replaces the defaults built from settings.
    """
    settings = settings or get_settings()
    mongo = mongo or MongoStore(settings)
    blob_store = blob_store or build_blob_store(settings)

    # Initialize FastAPI application with metadata and orjson for performance
    app = FastAPI(
        title=settings.APP_NAME,
        description="REST API storing files, notes, projects, contacts, code snippets and an activity log.",
        version="1.0.0",
        default_response_class=ORJSONResponse,
        lifespan=_lifespan,
        openapi_tags=[
            {"name": "Health", "description": "Service health and diagnostics"},
            {"name": "Activity", "description": "Recent activity log"},
            {"name": "Files", "description": "File upload and download"},
            {"name": "Items", "description": "Generic CRUD for every item type"},
        ],
    )

    app.state.settings = settings
    app.state.mongo = mongo
    app.state.blob_store = blob_store
    app.state.item_service = ItemService(
        CollectionRegistry(mongo), blob_store, activity_limit=settings.ACTIVITY_LIMIT
    )

    # Middleware added last runs outermost: CORS, then size limit, then catch-all.
    install_error_handlers(app)
    app.add_middleware(
        RequestSizeLimitMiddleware,
        max_bytes=settings.JSON_BODY_MAX_BYTES,
        upload_max_bytes=settings.UPLOAD_MAX_BYTES,
        upload_paths=[UPLOAD_PATH],
    )
    origins = settings.cors_origins_list()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Root health remains available (back-compat)
    @app.get("/", summary="Health Check (root)", tags=["Health"])
    def health_check_root():
        """Root-level health check. Never touches the database."""
        return {"message": "Healthy"}

    # Order matters: fixed paths before the generic /api/{type} catch-alls.
    app.include_router(health_router)
    app.include_router(activity_router)
    app.include_router(files_router)
    app.include_router(items_router)

    logger.info("FastAPI app initialized", extra={"app_name": settings.APP_NAME, "env": settings.APP_ENV})
    return app


app = create_app()


# PUBLIC_INTERFACE
def serve() -> None:
    """Serve the application with uvicorn on 0.0.0.0:PORT.

    Set UVICORN_RELOAD=1 for auto-reload during development.
    """
    import os
    import uvicorn  # type: ignore

    port = get_settings().PORT
    logger.info("Starting uvicorn server", extra={"port": port})
    uvicorn.run(
        "item_vault.api.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("UVICORN_RELOAD", "").lower() in ("1", "true", "yes"),
        log_level="info",
    )


if __name__ == "__main__":
    # Allow running as: python -m item_vault.api.main
    serve()
