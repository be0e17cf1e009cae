"""Shared test fixtures and configuration."""

import os
from typing import Iterable
from unittest.mock import AsyncMock, patch

import pytest
import redis.asyncio as redis

from page_cache.cache import InMemoryStore, RedisStore, RedisStoreConfig
from page_cache.middleware import BufferedResponseWriter, Request, RequestContext


@pytest.fixture
def memory_store():
    """Create an empty in-memory store."""
    return InMemoryStore(default_ttl=300)


@pytest.fixture
def redis_mock():
    """Create a mock Redis client."""
    mock = AsyncMock(spec=redis.Redis)
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    mock.script_load = AsyncMock(return_value="counter_sha")
    mock.evalsha = AsyncMock(return_value=[2, 1])
    mock.scan = AsyncMock(return_value=(0, []))
    mock.ping = AsyncMock(return_value=True)
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def redis_store(redis_mock):
    """Create a Redis store backed by the mock client."""
    return RedisStore(
        RedisStoreConfig(key_prefix="test", default_ttl=300), client=redis_mock
    )


@pytest.fixture
def make_context():
    """Build a request context for a URI and a handler chain."""

    def _make(uri: str = "/", handlers: Iterable = ()) -> RequestContext:
        return RequestContext(Request.from_url(uri), BufferedResponseWriter(), handlers)

    return _make


# Test markers
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")


# Environment setup
@pytest.fixture(autouse=True)
def setup_test_environment():
    """Setup test environment variables."""
    test_env = {
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, test_env):
        yield
