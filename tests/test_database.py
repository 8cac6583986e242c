from __future__ import annotations

import pytest

from sales_analytics.core.config import Settings
from sales_analytics.core.database import PostgresDatabase, sanitize_database_url


def test_sanitize_database_url_drops_sslmode():
    url = "postgresql://user:secret@db:5432/sales?sslmode=require&application_name=dash"
    assert sanitize_database_url(url) == "postgresql://user:secret@db:5432/sales?application_name=dash"


def test_sanitize_database_url_without_query_is_unchanged():
    url = "postgresql://user@localhost/sales"
    assert sanitize_database_url(url) == url


def test_database_from_settings():
    settings = Settings(
        DATABASE_URL="postgresql://user@localhost/sales",
        DB_POOL_MIN_SIZE=2,
        DB_POOL_MAX_SIZE=8,
        DB_COMMAND_TIMEOUT=12.5,
    )
    database = PostgresDatabase.from_settings(settings)

    assert database.dsn == "postgresql://user@localhost/sales"
    assert (database.min_size, database.max_size, database.command_timeout) == (2, 8, 12.5)


def test_pool_is_unavailable_before_connect():
    database = PostgresDatabase(dsn="postgresql://user@localhost/sales")
    with pytest.raises(RuntimeError, match="not initialized"):
        _ = database.pool


@pytest.mark.asyncio
async def test_connect_requires_database_url():
    database = PostgresDatabase(dsn="")
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        await database.connect()


@pytest.mark.asyncio
async def test_close_without_pool_is_a_no_op():
    database = PostgresDatabase(dsn="postgresql://user@localhost/sales")
    assert await database.close() is None
