"""Tests for serving cached handler chains through FastAPI."""

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from page_cache.cache import InMemoryStore, ResponseSnapshot, page_key
from page_cache.middleware import (
    BufferedResponseWriter,
    cache_endpoint,
    cache_middleware,
    cache_page,
    cached,
    site_cache,
)
from page_cache.middleware.fastapi_adapter import to_response


@pytest.fixture
def store():
    return InMemoryStore(default_ttl=300)


@pytest.fixture
def calls():
    return []


@pytest.fixture
def app(store, calls):
    """Application with one route per caching strategy."""

    async def widgets(ctx):
        calls.append(ctx.request.uri)
        ctx.writer.write_header(201)
        ctx.writer.headers.set("Content-Type", "application/json")
        ctx.writer.headers.add("Set-Cookie", "a=1")
        ctx.writer.headers.add("Set-Cookie", "b=2")
        ctx.writer.headers.set("Access-Control-Allow-Origin", "*")
        await ctx.writer.write(b'{"id":')
        await ctx.writer.write(b"5}")

    application = FastAPI()
    application.add_api_route(
        "/widgets", cache_endpoint(cache_middleware(store), cached(60), widgets)
    )
    application.add_api_route("/page", cache_endpoint(cache_page(store, 60, widgets)))
    application.add_api_route("/site", cache_endpoint(site_cache(store, 60), widgets))
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


class TestCacheEndpoint:
    """Test the FastAPI endpoint adapter end to end."""

    def test_second_request_is_served_from_cache(self, client, calls):
        """Test that the handler runs once for repeated requests."""
        first = client.get("/widgets?id=5")
        second = client.get("/widgets?id=5")

        assert calls == ["/widgets?id=5"]
        for response in (first, second):
            assert response.status_code == 201
            assert response.json() == {"id": 5}
            assert response.headers["content-type"] == "application/json"
            assert response.headers.get_list("set-cookie") == ["a=1", "b=2"]
            assert response.headers["content-length"] == "8"

    def test_cached_strategy_drops_cors_on_hit(self, client):
        """Test CORS filtering through the HTTP surface."""
        first = client.get("/widgets")
        second = client.get("/widgets")

        assert first.headers["access-control-allow-origin"] == "*"
        assert "access-control-allow-origin" not in second.headers

    def test_cache_key_uses_raw_path_and_query(self, client, store):
        """Test that the request URI is keyed as the client sent it."""
        client.get("/page?q=a%20b")

        assert store.size() == 1
        snapshot = asyncio.run(store.get(page_key("/page?q=a%20b"), ResponseSnapshot))
        assert snapshot.status == 201

    def test_distinct_queries_are_distinct_entries(self, client, calls):
        """Test that query strings separate cache entries."""
        client.get("/page?id=1")
        client.get("/page?id=2")
        client.get("/page?id=1")

        assert calls == ["/page?id=1", "/page?id=2"]

    def test_site_cache_serves_prepopulated_entry(self, client, store, calls):
        """Test the read-only strategy behind FastAPI."""
        asyncio.run(
            store.set(
                page_key("/site"),
                ResponseSnapshot(status=200, headers={"X-Warm": ["yes"]}, body=b"warm"),
            )
        )

        response = client.get("/site")

        assert calls == []
        assert response.status_code == 200
        assert response.text == "warm"
        assert response.headers["x-warm"] == "yes"


class TestToResponse:
    """Test conversion of a recorded writer into a response."""

    @pytest.mark.asyncio
    async def test_keeps_duplicates_and_recomputes_length(self):
        """Test that stale Content-Length values are replaced."""
        writer = BufferedResponseWriter()
        writer.write_header(202)
        writer.headers.add("Content-Length", "999")
        writer.headers.add("X-Tag", "a")
        writer.headers.add("X-Tag", "b")
        await writer.write(b"abc")

        response = to_response(writer)

        assert response.status_code == 202
        assert response.body == b"abc"
        assert response.headers.getlist("x-tag") == ["a", "b"]
        assert response.headers["content-length"] == "3"
