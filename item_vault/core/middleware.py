from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware

from .errors import error_response
from .logger import get_logger

logger = get_logger(__name__)

# Room for multipart boundaries and the text fields sent alongside the file.
MULTIPART_OVERHEAD = 64 * 1024


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared Content-Length exceeds the limit.

    Upload paths get their own, larger limit.
    """

    def __init__(self, app, max_bytes: int, upload_max_bytes: int, upload_paths: Iterable[str] = ()):
        super().__init__(app)
        self.max_bytes = max_bytes
        self.upload_max_bytes = upload_max_bytes
        self.upload_paths = frozenset(upload_paths)

    async def dispatch(self, request, call_next):
        length = request.headers.get("content-length")
        try:
            size = int(length) if length is not None else None
        except ValueError:
            size = None

        if request.url.path in self.upload_paths:
            limit = self.upload_max_bytes + MULTIPART_OVERHEAD
        else:
            limit = self.max_bytes
        if size is not None and size > limit:
            logger.warning(
                "Request body too large",
                extra={"path": request.url.path, "content_length": size, "limit": limit},
            )
            return error_response(413, f"Request body exceeds the {limit} byte limit.")
        return await call_next(request)
