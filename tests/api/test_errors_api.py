"""API tests for the error envelope and request limits."""

import pytest
from httpx import ASGITransport, AsyncClient

from item_vault.api.main import create_app
from item_vault.db.mongo import MongoStore

from tests.utils.fakes import make_settings


@pytest.mark.api
class TestErrorEnvelope:

    async def test_unknown_route(self, async_client):
        response = await async_client.get("/nowhere")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}

    async def test_too_many_segments(self, async_client):
        response = await async_client.get("/api/notes/a/b")
        assert response.status_code == 404
        assert set(response.json()) == {"error"}

    async def test_method_not_allowed(self, async_client):
        response = await async_client.patch("/api/notes/abc", json={})
        assert response.status_code == 405
        assert response.json() == {"error": "Method Not Allowed"}

    async def test_malformed_json_body(self, async_client):
        response = await async_client.post(
            "/api/notes", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 500
        assert response.json()["error"].startswith("Invalid request")

    async def test_non_object_json_body(self, async_client):
        response = await async_client.post("/api/notes", json=["a", "b"])
        assert response.status_code == 500
        assert response.json()["error"].startswith("Invalid request")

    async def test_missing_database_uri(self):
        settings = make_settings(MONGODB_URI=None)
        app = create_app(settings=settings, mongo=MongoStore(settings))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/notes")
        assert response.status_code == 500
        assert response.json() == {"error": "MONGODB_URI is missing in Environment Variables"}

    async def test_unreachable_database(self, async_client, mongo_client):
        mongo_client.admin.fail_ping = True
        response = await async_client.get("/api/notes")
        assert response.status_code == 500
        assert response.json()["error"].startswith("MongoDB connection error")


@pytest.mark.api
class TestBodyLimit:

    async def test_json_body_over_limit(self, mongo, s3_blob_store):
        app = create_app(settings=make_settings(JSON_BODY_MAX_BYTES=64), mongo=mongo, blob_store=s3_blob_store)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/api/notes", json={"title": "t", "content": "x" * 200})
            assert response.status_code == 413
            assert "limit" in response.json()["error"]

            small = await client.post("/api/notes", json={"title": "t"})
            assert small.status_code == 201
