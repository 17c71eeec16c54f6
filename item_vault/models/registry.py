"""
Entity registry: the closed table of item types served by the generic routes.

Public type tokens map to exactly one ItemType member. The five code kinds are
reachable both as flat tokens (``/api/python``) and through the nested
``/api/codes/{subtype}`` form; both go through the same lookup.
"""

from enum import Enum
from typing import Dict, Type

from ..core.errors import InvalidTypeError
from .schemas import (
    ActivityEntry,
    CodeItem,
    ContactItem,
    FileItem,
    ItemBase,
    NoteItem,
    ProjectItem,
)

ACTIVITY_COLLECTION = "activities"


# PUBLIC_INTERFACE
class ItemType(str, Enum):
    """Every item kind served by the generic CRUD routes."""

    FILES = "files"
    NOTES = "notes"
    PROJECTS = "projects"
    CONTACTS = "contacts"
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    HTML = "html"
    CSS = "css"
    OTHER = "other"

    @property
    def is_code(self) -> bool:
        return self in CODE_SUBTYPES

    @property
    def collection_name(self) -> str:
        """MongoDB collection backing this type."""
        return _COLLECTIONS[self]

    @property
    def schema(self) -> Type[ItemBase]:
        return _SCHEMAS[self]


CODE_SUBTYPES = frozenset(
    {ItemType.PYTHON, ItemType.JAVASCRIPT, ItemType.HTML, ItemType.CSS, ItemType.OTHER}
)

# Names match the pluralized model names already present in existing databases.
_COLLECTIONS: Dict[ItemType, str] = {
    ItemType.FILES: "files",
    ItemType.NOTES: "notes",
    ItemType.PROJECTS: "projects",
    ItemType.CONTACTS: "contacts",
    ItemType.PYTHON: "pythoncodes",
    ItemType.JAVASCRIPT: "javascriptcodes",
    ItemType.HTML: "htmlcodes",
    ItemType.CSS: "csscodes",
    ItemType.OTHER: "othercodes",
}

_SCHEMAS: Dict[ItemType, Type[ItemBase]] = {
    ItemType.FILES: FileItem,
    ItemType.NOTES: NoteItem,
    ItemType.PROJECTS: ProjectItem,
    ItemType.CONTACTS: ContactItem,
    ItemType.PYTHON: CodeItem,
    ItemType.JAVASCRIPT: CodeItem,
    ItemType.HTML: CodeItem,
    ItemType.CSS: CodeItem,
    ItemType.OTHER: CodeItem,
}

ACTIVITY_SCHEMA: Type[ItemBase] = ActivityEntry

_BY_TOKEN: Dict[str, ItemType] = {t.value: t for t in ItemType}


# PUBLIC_INTERFACE
def resolve_type(token: str) -> ItemType:
    """Return the ItemType for a public token.

    Lookup is exact and case-sensitive. Unknown tokens raise InvalidTypeError
    naming the token.
    """
    try:
        return _BY_TOKEN[token]
    except KeyError:
        raise InvalidTypeError(token) from None


# PUBLIC_INTERFACE
def resolve_code_subtype(token: str) -> ItemType:
    """Resolve a token from the nested /codes/{subtype} form."""
    item_type = resolve_type(token)
    if not item_type.is_code:
        raise InvalidTypeError(token)
    return item_type
