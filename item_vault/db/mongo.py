"""
Async MongoDB client utilities.

Provides MongoStore, the application's handle on the document store:
- Constructed once at startup and kept on ``app.state``; closed at shutdown
- Lazily connects on first use with the configured timeouts
- Runs an explicit readiness check (ping) before every operation; a handle
  that fails it is closed and replaced once before the operation gives up

The connection string and database name come from Settings (see core.config).
"""

from typing import Any, Callable, Optional

from motor.motor_asyncio import AsyncIOMotorClient  # type: ignore
from pymongo.errors import PyMongoError

from ..core.config import Settings
from ..core.errors import ConfigurationError, StoreError
from ..core.logger import get_logger

_logger = get_logger(__name__)

MISSING_URI_MESSAGE = "MONGODB_URI is missing in Environment Variables"


# PUBLIC_INTERFACE
class MongoStore:
    """Lazily connected, health-checked MongoDB handle."""

    def __init__(self, settings: Settings, client_factory: Optional[Callable[[], Any]] = None):
        """
        Args:
            settings: Application settings with MONGODB_URI and timeouts.
            client_factory: Optional callable returning a motor-compatible
                client. Defaults to building an AsyncIOMotorClient from settings.
        """
        self._settings = settings
        self._client_factory = client_factory or self._build_client
        self._client: Optional[Any] = None

    @property
    def configured(self) -> bool:
        return bool((self._settings.MONGODB_URI or "").strip())

    def _build_client(self) -> AsyncIOMotorClient:
        if not self.configured:
            raise ConfigurationError(MISSING_URI_MESSAGE)
        return AsyncIOMotorClient(
            self._settings.MONGODB_URI,
            serverSelectionTimeoutMS=self._settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
            socketTimeoutMS=self._settings.MONGO_SOCKET_TIMEOUT_MS,
            tz_aware=True,
        )

    async def _connect(self) -> None:
        self._client = self._client_factory()
        await self._client.admin.command("ping")
        _logger.info("Connected to MongoDB.", extra={"database": self._database_name()})

    def _database_name(self) -> str:
        return self._settings.MONGODB_DB_NAME

    def _close_client(self) -> None:
        if self._client is not None:
            try:
                self._client.close()
            except PyMongoError as exc:
                _logger.error("Error while closing MongoDB client.", exc_info=exc)
        self._client = None

    # PUBLIC_INTERFACE
    async def ensure_ready(self) -> None:
        """Verify the connection before an operation, connecting if needed.

        An existing client is pinged every time, so a connection dropped since
        the last request is detected and replaced here rather than failing the
        operation that follows.

        Raises:
            ConfigurationError: MONGODB_URI is not set.
            StoreError: the server could not be reached.
        """
        if not self.configured:
            raise ConfigurationError(MISSING_URI_MESSAGE)

        if self._client is not None:
            try:
                await self._client.admin.command("ping")
                return
            except PyMongoError as exc:
                _logger.warning("Stale MongoDB connection; reconnecting.", extra={"error": str(exc)})
                self._close_client()

        try:
            await self._connect()
        except PyMongoError as exc:
            _logger.error("MongoDB connection error.", exc_info=exc)
            self._close_client()
            raise StoreError(f"MongoDB connection error: {exc}") from exc

    # PUBLIC_INTERFACE
    def mark_stale(self) -> None:
        """Drop the client after a connection failure; the next operation reconnects."""
        self._close_client()

    # PUBLIC_INTERFACE
    async def database(self):
        """Return the database handle, connecting first if needed."""
        await self.ensure_ready()
        return self._client.get_default_database(self._database_name())

    # PUBLIC_INTERFACE
    async def collection(self, name: str):
        """Return a collection handle by name."""
        db = await self.database()
        return db[name]

    # PUBLIC_INTERFACE
    async def ping(self) -> bool:
        """Return True when the server answers a ping. Never raises."""
        try:
            await self.ensure_ready()
        except (ConfigurationError, StoreError):
            return False
        return True

    # PUBLIC_INTERFACE
    def close(self) -> None:
        """Close the client if one was opened."""
        if self._client is not None:
            self._close_client()
            _logger.info("MongoDB client closed.")
