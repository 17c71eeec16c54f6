"""
Application configuration module.

Provides strongly-typed settings using Pydantic BaseSettings. Values are loaded
from environment variables and .env (via python-dotenv automatically loaded by
Pydantic). Use get_settings() to obtain a cached Settings instance.

Object storage:
- S3 is used only when both AWS_ACCESS_KEY_ID and S3_BUCKET_NAME are set.
- Otherwise uploads land in LOCAL_UPLOAD_DIR and download/delete of stored
  objects fail with a configuration error (see services/blob_store.py).
"""

from functools import lru_cache
from typing import Optional, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# PUBLIC_INTERFACE
class Settings(BaseSettings):
    """Centralized application configuration powered by Pydantic BaseSettings."""

    # App
    APP_NAME: str = Field(default="Item Vault API", description="Application name")
    APP_ENV: str = Field(default="development", description="Execution environment")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level (DEBUG, INFO, WARNING, ERROR)")
    PORT: int = Field(default=3000, description="Port for the FastAPI server")
    CORS_ALLOWED_ORIGINS: str = Field(default="*", description="Comma-separated list of allowed CORS origins or '*'")

    # Document store (MongoDB)
    MONGODB_URI: Optional[str] = Field(
        default=None,
        description="MongoDB connection string. Required by every route that touches the database.",
    )
    MONGODB_DB_NAME: str = Field(
        default="test",
        description="Database used when MONGODB_URI does not name one",
    )
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = Field(
        default=5000, description="Connection-establishment (server selection) timeout in milliseconds"
    )
    MONGO_SOCKET_TIMEOUT_MS: int = Field(default=45000, description="Idle socket timeout in milliseconds")

    # Object storage (S3)
    AWS_ACCESS_KEY_ID: Optional[str] = Field(default=None, description="AWS access key id")
    AWS_SECRET_ACCESS_KEY: Optional[str] = Field(default=None, description="AWS secret access key")
    AWS_REGION: str = Field(default="ap-south-2", description="AWS region of the bucket")
    S3_BUCKET_NAME: Optional[str] = Field(default=None, description="Bucket that stores uploaded files")
    S3_KEY_PREFIX: str = Field(default="uploads/", description="Key prefix for uploaded objects")
    S3_ENDPOINT_URL: Optional[str] = Field(
        default=None, description="Custom endpoint for S3-compatible stores (MinIO, LocalStack)"
    )
    LOCAL_UPLOAD_DIR: str = Field(default="/tmp", description="Scratch directory used when S3 is not configured")

    # Limits
    UPLOAD_MAX_BYTES: int = Field(default=50 * 1024 * 1024, description="Maximum accepted upload size in bytes")
    JSON_BODY_MAX_BYTES: int = Field(default=10 * 1024 * 1024, description="Maximum accepted JSON body size in bytes")
    SIGNED_URL_TTL_SECONDS: int = Field(default=60, description="Lifetime of signed download URLs")
    ACTIVITY_LIMIT: int = Field(default=20, description="Number of activity entries returned by GET /api/activity")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Convenience helpers (non-env)
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS_ALLOWED_ORIGINS into a list. '*' returns ['*'] to indicate permissive mode.
        """
        raw = (self.CORS_ALLOWED_ORIGINS or "").strip()
        if raw == "*" or raw == "":
            return ["*"]
        return [o.strip() for o in raw.split(",") if o.strip()]

    def s3_configured(self) -> bool:
        """True when credentials and a bucket are present."""
        return bool((self.AWS_ACCESS_KEY_ID or "").strip() and (self.S3_BUCKET_NAME or "").strip())


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
