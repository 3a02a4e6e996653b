"""Unit tests for the connection pool wrapper and rate-limit keys"""
from unittest.mock import AsyncMock, MagicMock

import psycopg
import pytest
from starlette.requests import Request

from momentum import config
from momentum.api.middleware import rate_limit_key
from momentum.db.connection import Database
from momentum.exceptions import ConnectionError


def make_request(headers=None):
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": ("10.0.0.7", 5000),
    })


@pytest.fixture
def pooled_db():
    """Database whose pool hands out a mocked connection"""
    cursor = AsyncMock()
    conn = MagicMock()
    conn.cursor.return_value.__aenter__.return_value = cursor
    database = Database("postgresql://test")
    database._pool = MagicMock()
    database._pool.connection.return_value.__aenter__.return_value = conn
    return database, cursor


class TestDatabase:
    """Test pool configuration and health"""

    def test_pool_sizes_default_to_config(self, monkeypatch):
        monkeypatch.setattr(config, "DB_POOL_MIN_SIZE", 2)
        monkeypatch.setattr(config, "DB_POOL_MAX_SIZE", 7)
        database = Database("postgresql://test")

        assert (database.min_size, database.max_size) == (2, 7)
        assert not database.is_initialized

    @pytest.mark.asyncio
    async def test_connection_requires_pool(self):
        with pytest.raises(ConnectionError):
            async with Database("postgresql://test").connection():
                pass

    @pytest.mark.asyncio
    async def test_ping_without_pool(self):
        assert await Database("postgresql://test").ping() is False

    @pytest.mark.asyncio
    async def test_ping(self, pooled_db):
        database, cursor = pooled_db

        assert await database.ping() is True
        cursor.execute.assert_awaited_once_with("SELECT 1")

    @pytest.mark.asyncio
    async def test_ping_failure(self, pooled_db):
        database, cursor = pooled_db
        cursor.execute.side_effect = psycopg.OperationalError("server closed the connection")

        assert await database.ping() is False


class TestRateLimitKey:
    """Test rate-limit bucketing"""

    def test_bearer_key(self):
        assert rate_limit_key(make_request({"Authorization": "Bearer test_key_123"})) == "key:test_key_123"

    def test_falls_back_to_client_address(self):
        assert rate_limit_key(make_request()) == "10.0.0.7"
