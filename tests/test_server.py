"""
Tests for the REST surface.
"""

import pytest
from aiohttp.test_utils import TestClient, TestServer

from datagate.server.app import AppConfig, create_app
from datagate.server.ratelimit import RateLimiter

from conftest import BrokenAdapter


@pytest.fixture
async def client(seeded_adapter):
    """Create a test client over the seeded in-memory adapter."""
    app = create_app(AppConfig(adapter=seeded_adapter, rate_limit=1000, cache_ttl=30))
    async with TestClient(TestServer(app)) as client:
        yield client


async def _first_id(client, table="users") -> str:
    resp = await client.get(f"/api/v1/{table}", params={"limit": "1", "orderBy": "name"})
    return (await resp.json())["data"][0]["id"]


class TestHealth:
    """Tests for GET /health."""

    async def test_ok(self, client):
        resp = await client.get("/api/v1/health")
        assert resp.status == 200
        assert await resp.json() == {"ok": True, "latencyMs": 0}

    async def test_down_is_503(self):
        app = create_app(AppConfig(adapter=BrokenAdapter()))
        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/api/v1/health")
            assert resp.status == 503
            assert (await resp.json())["ok"] is False


class TestList:
    """Tests for GET /{table}."""

    async def test_paginated_shape(self, client):
        resp = await client.get("/api/v1/users", params={"limit": "2", "offset": "1"})
        assert resp.status == 200

        body = await resp.json()
        assert len(body["data"]) == 2
        assert body["count"] == 4
        assert body["limit"] == 2
        assert body["offset"] == 1
        assert body["hasMore"] is True

    async def test_filters_ordering_and_select(self, client):
        resp = await client.get(
            "/api/v1/users",
            params=[
                ("filter", "age:gte:18"),
                ("filter", "role:neq:admin"),
                ("orderBy", "name:desc"),
                ("select", "name,age"),
            ],
        )
        body = await resp.json()

        assert body["data"] == [{"name": "dave", "age": 25}, {"name": "carol", "age": 25}]
        assert body["count"] == 2
        assert body["hasMore"] is False

    async def test_malformed_filter_is_400(self, client):
        resp = await client.get("/api/v1/users", params={"filter": "age:gte"})
        assert resp.status == 400
        assert "age:gte" in (await resp.json())["error"]

    async def test_embedded_select_is_400(self, client):
        resp = await client.get("/api/v1/users", params={"select": "*,secrets(*)"})
        assert resp.status == 400
        assert "select" in (await resp.json())["error"]

    async def test_bad_limit_is_400(self, client):
        resp = await client.get("/api/v1/users", params={"limit": "lots"})
        assert resp.status == 400

    async def test_invalid_table_is_400(self, client):
        resp = await client.get("/api/v1/1users")
        assert resp.status == 400
        assert "error" in await resp.json()


class TestCount:
    """Tests for GET /{table}/count."""

    async def test_count_all(self, client):
        resp = await client.get("/api/v1/users/count")
        assert await resp.json() == {"count": 4}

    async def test_count_filtered(self, client):
        resp = await client.get("/api/v1/users/count", params=[("filter", "age:eq:25")])
        assert await resp.json() == {"count": 2}


class TestSingleRecord:
    """Tests for GET/PUT/DELETE /{table}/{id}."""

    async def test_get(self, client):
        record_id = await _first_id(client)
        resp = await client.get(f"/api/v1/users/{record_id}")
        assert resp.status == 200
        assert (await resp.json())["name"] == "alice"

    async def test_get_missing_is_404(self, client):
        resp = await client.get("/api/v1/users/missing")
        assert resp.status == 404
        assert await resp.json() == {"error": "Not found"}

    async def test_update(self, client):
        record_id = await _first_id(client)
        await client.get(f"/api/v1/users/{record_id}")  # Warm the cache

        resp = await client.put(f"/api/v1/users/{record_id}", json={"age": 35})
        assert resp.status == 200
        assert (await resp.json())["age"] == 35

        resp = await client.get(f"/api/v1/users/{record_id}")
        assert (await resp.json())["age"] == 35

    async def test_update_missing_is_404(self, client):
        resp = await client.put("/api/v1/users/missing", json={"age": 1})
        assert resp.status == 404

    async def test_update_requires_object(self, client):
        resp = await client.put("/api/v1/users/x", json=[1, 2])
        assert resp.status == 400

    async def test_delete(self, client):
        record_id = await _first_id(client)

        resp = await client.delete(f"/api/v1/users/{record_id}")
        assert resp.status == 200
        assert await resp.json() == {"ok": True}

        resp = await client.get(f"/api/v1/users/{record_id}")
        assert resp.status == 404

    async def test_delete_missing_is_404(self, client):
        resp = await client.delete("/api/v1/users/missing")
        assert resp.status == 404


class TestCreate:
    """Tests for POST /{table} and POST /{table}/batch."""

    async def test_create(self, client):
        resp = await client.post("/api/v1/posts", json={"title": "hello"})
        assert resp.status == 201

        body = await resp.json()
        assert body["title"] == "hello"
        assert body["id"]

    async def test_create_requires_object(self, client):
        resp = await client.post("/api/v1/posts", json=["nope"])
        assert resp.status == 400
        assert await resp.json() == {"error": "Body must be an object"}

    async def test_invalid_json_is_400(self, client):
        resp = await client.post(
            "/api/v1/posts", data="{not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status == 400

    async def test_non_utf8_body_is_400(self, client):
        resp = await client.post(
            "/api/v1/posts",
            data=b'{"title": "\xff\xfe"}',
            headers={"Content-Type": "application/json"},
        )
        assert resp.status == 400
        assert "valid JSON" in (await resp.json())["error"]

    async def test_batch(self, client):
        resp = await client.post("/api/v1/posts/batch", json=[{"n": 1}, {"n": 2}, {"n": 3}])
        assert resp.status == 201
        assert [r["n"] for r in await resp.json()] == [1, 2, 3]

        resp = await client.get("/api/v1/posts/count")
        assert await resp.json() == {"count": 3}

    async def test_batch_requires_array(self, client):
        resp = await client.post("/api/v1/posts/batch", json={"n": 1})
        assert resp.status == 400
        assert await resp.json() == {"error": "Body must be an array"}


class TestAllowList:
    """Tests for the table allow-list."""

    async def test_disallowed_table_is_400(self, seeded_adapter):
        app = create_app(AppConfig(adapter=seeded_adapter, allowed_tables=["users"]))
        async with TestClient(TestServer(app)) as client:
            assert (await client.get("/api/v1/users")).status == 200
            resp = await client.get("/api/v1/posts")
            assert resp.status == 400
            assert "Table not allowed" in (await resp.json())["error"]


class TestAdapterFailures:
    """Tests for backend failures over HTTP."""

    async def test_adapter_error_is_400(self):
        app = create_app(AppConfig(adapter=BrokenAdapter()))
        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/api/v1/users")
            assert resp.status == 400
            assert "connection refused" in (await resp.json())["error"]


class TestRateLimit:
    """Tests for rate limiting over HTTP."""

    async def test_over_limit_is_429(self, seeded_adapter):
        limiter = RateLimiter(max_requests=2, window_seconds=60)
        app = create_app(AppConfig(adapter=seeded_adapter), limiter=limiter)
        async with TestClient(TestServer(app)) as client:
            assert (await client.get("/api/v1/users/count")).status == 200
            assert (await client.get("/api/v1/users/count")).status == 200

            resp = await client.get("/api/v1/users/count")
            assert resp.status == 429
            assert await resp.json() == {"error": "Too many requests"}

            # A different client has its own budget
            resp = await client.get("/api/v1/users/count", headers={"X-Forwarded-For": "10.0.0.9"})
            assert resp.status == 200


class TestCors:
    """Tests for CORS headers."""

    async def test_wildcard_origin(self, client):
        resp = await client.get("/api/v1/users/count", headers={"Origin": "https://app.example"})
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    async def test_preflight(self, seeded_adapter):
        app = create_app(
            AppConfig(adapter=seeded_adapter, cors_origins=["https://app.example"])
        )
        async with TestClient(TestServer(app)) as client:
            resp = await client.options(
                "/api/v1/users",
                headers={
                    "Origin": "https://app.example",
                    "Access-Control-Request-Method": "POST",
                },
            )
            assert resp.status == 204
            assert resp.headers["Access-Control-Allow-Origin"] == "https://app.example"
            assert "POST" in resp.headers["Access-Control-Allow-Methods"]
            assert resp.headers["Access-Control-Max-Age"] == "86400"

    async def test_unlisted_origin_gets_no_header(self, seeded_adapter):
        app = create_app(
            AppConfig(adapter=seeded_adapter, cors_origins=["https://app.example"])
        )
        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/api/v1/users/count", headers={"Origin": "https://evil.example"})
            assert resp.status == 200
            assert "Access-Control-Allow-Origin" not in resp.headers
