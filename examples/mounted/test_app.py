"""Tests for the mounted dispatchers example."""

import json

import pytest

from junction.testing import TestClient


class TestMounted:
    @pytest.mark.anyio
    async def test_index(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/")
            assert response.status == 200
            assert response.text == "try /api/users"

    @pytest.mark.anyio
    async def test_list_users(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/api/users")
            assert response.status == 200
            assert [u["name"] for u in json.loads(response.text)] == ["Ada", "Grace"]
            assert response.header("x-response-time") is not None

    @pytest.mark.anyio
    async def test_single_user(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/api/users/2")
            assert json.loads(response.text) == {"id": 2, "name": "Grace"}

    @pytest.mark.anyio
    async def test_unknown_user_is_json_404(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/api/users/9")
            assert response.status == 404
            assert json.loads(response.text) == {"error": "no user 9", "status": 404}

    @pytest.mark.anyio
    async def test_admin_requires_token(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/api/admin/stats")
            assert response.status == 401
            assert response.header("content-type") == "application/json"

    @pytest.mark.anyio
    async def test_admin_with_token(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get(
                "/api/admin/stats", headers={"Authorization": "Bearer s3cr3t"}
            )
            assert response.status == 200
            assert json.loads(response.text) == {"users": 2, "mounted_at": "/api/admin/stats"}

    @pytest.mark.anyio
    async def test_outside_api_falls_through_to_404(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/nowhere")
            assert response.status == 404
            assert "Cannot GET /nowhere" in response.text
