"""
Pydantic schemas describing the recognized field shape of every collection.

The models document the API (OpenAPI) and define which fields a collection
stores and which of them must be present on create. Stored documents are not
coerced through these models: only field presence is checked.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, Field, ConfigDict


# ---------------------------------------------------------------------------
# Common/Utility Schemas
# ---------------------------------------------------------------------------

# PUBLIC_INTERFACE
class HealthResponse(BaseModel):
    """Basic health response schema."""
    status: str = Field(..., description="Health status message, e.g., 'ok'")


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    """Error envelope returned by every failing request."""
    error: str = Field(..., description="Human readable error message.")


# ---------------------------------------------------------------------------
# Item Schemas
# ---------------------------------------------------------------------------

class ItemBase(BaseModel):
    """Fields shared by every stored item."""
    id: Optional[str] = Field(default=None, description="External identifier; generated when omitted.")
    date: Optional[datetime] = Field(default=None, description="Creation time, always set by the server.")

    model_config = ConfigDict(extra="ignore")


# PUBLIC_INTERFACE
class FileItem(ItemBase):
    """Metadata of an uploaded file. The bytes live in the blob store."""
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    filename: Optional[str] = Field(default=None, description="Storage key of the object.")
    originalname: Optional[str] = Field(default=None, description="Client supplied file name.")
    path: Optional[str] = Field(default=None, description="Resolved URL of the object.")
    mimetype: Optional[str] = None
    size: Optional[int] = Field(default=None, description="Size in bytes.")


# PUBLIC_INTERFACE
class NoteItem(ItemBase):
    title: str
    content: Optional[str] = None


# PUBLIC_INTERFACE
class ProjectItem(ItemBase):
    name: str
    description: Optional[str] = None


# PUBLIC_INTERFACE
class ContactItem(ItemBase):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


# PUBLIC_INTERFACE
class CodeItem(ItemBase):
    """A code snippet; one collection per language."""
    title: str
    content: Optional[str] = None


# PUBLIC_INTERFACE
class ActivityEntry(ItemBase):
    """One entry of the append-only activity log."""
    action: Optional[str] = None
    itemType: Optional[str] = None
    itemName: Optional[str] = None


# PUBLIC_INTERFACE
class ActivityIn(BaseModel):
    """Payload accepted by POST /api/activity."""
    action: Optional[str] = Field(default=None, description="What happened, e.g. 'created'.")
    itemType: Optional[str] = Field(default=None, description="Type token of the affected item.")
    itemName: Optional[str] = Field(default=None, description="Display name of the affected item.")

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": {"action": "created", "itemType": "notes", "itemName": "Groceries"}},
    )


# ---------------------------------------------------------------------------
# Field shape helpers
# ---------------------------------------------------------------------------

_SERVER_FIELDS = ("id", "date")


# PUBLIC_INTERFACE
def recognized_fields(schema: Type[ItemBase]) -> Tuple[str, ...]:
    """Names of the variant fields a collection stores (excluding id/date)."""
    return tuple(name for name in schema.model_fields if name not in _SERVER_FIELDS)


# PUBLIC_INTERFACE
def required_fields(schema: Type[ItemBase]) -> Tuple[str, ...]:
    """Names of the fields that must be present when a record is created."""
    return tuple(
        name for name, info in schema.model_fields.items()
        if info.is_required() and name not in _SERVER_FIELDS
    )


# PUBLIC_INTERFACE
def shape_fields(schema: Type[ItemBase], payload: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the recognized variant fields of payload."""
    allowed = recognized_fields(schema)
    return {k: v for k, v in payload.items() if k in allowed}
