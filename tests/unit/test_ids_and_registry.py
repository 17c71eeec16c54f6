"""Unit tests for identifier generation and the entity registry."""

import re

import pytest

from item_vault.core.errors import InvalidTypeError
from item_vault.core.ids import generate_id
from item_vault.models.registry import CODE_SUBTYPES, ItemType, resolve_code_subtype, resolve_type
from item_vault.models.schemas import CodeItem, FileItem, NoteItem, recognized_fields, required_fields

ID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


@pytest.mark.unit
class TestGenerateId:

    def test_canonical_v4_format(self):
        for _ in range(200):
            value = generate_id()
            assert len(value) == 36
            assert ID_PATTERN.match(value), value

    def test_ids_are_distinct(self):
        assert len({generate_id() for _ in range(1000)}) == 1000


@pytest.mark.unit
class TestRegistry:

    @pytest.mark.parametrize(
        "token",
        ["files", "notes", "projects", "contacts", "python", "javascript", "html", "css", "other"],
    )
    def test_every_public_token_resolves(self, token):
        assert resolve_type(token).value == token

    def test_code_subtypes_share_the_code_schema(self):
        assert CODE_SUBTYPES == {
            ItemType.PYTHON, ItemType.JAVASCRIPT, ItemType.HTML, ItemType.CSS, ItemType.OTHER
        }
        for item_type in CODE_SUBTYPES:
            assert item_type.schema is CodeItem
            assert item_type.is_code
        assert not ItemType.NOTES.is_code

    def test_code_collections_are_separate(self):
        names = {t.collection_name for t in ItemType}
        assert len(names) == len(ItemType)
        assert ItemType.PYTHON.collection_name == "pythoncodes"

    @pytest.mark.parametrize("token", ["Notes", "note", "codes", "activity", "", "files "])
    def test_unknown_token_raises_invalid_type(self, token):
        with pytest.raises(InvalidTypeError) as exc_info:
            resolve_type(token)
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == f"Invalid type: {token}"

    def test_nested_form_accepts_only_code_subtypes(self):
        assert resolve_code_subtype("css") is ItemType.CSS
        with pytest.raises(InvalidTypeError, match="Invalid type: notes"):
            resolve_code_subtype("notes")


@pytest.mark.unit
class TestFieldShapes:

    def test_required_fields(self):
        assert required_fields(NoteItem) == ("title",)
        assert required_fields(FileItem) == ()

    def test_recognized_fields_exclude_server_fields(self):
        fields = recognized_fields(FileItem)
        assert "id" not in fields and "date" not in fields
        assert {"filename", "originalname", "path", "mimetype", "size", "tags"} <= set(fields)
