"""
Async PostgreSQL access (raw SQL) on top of an asyncpg connection pool.

`PostgresDatabase` owns the pool. The FastAPI lifespan opens it on startup and
closes it on shutdown (see `sales_analytics/main.py`); anything that only needs
to read rows depends on the `Database` protocol so an in-memory double can
stand in for it.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from sales_analytics.core.config import Settings


logger = logging.getLogger(__name__)


class Database(Protocol):
    async def fetch_all(self, sql: str, *args: Any) -> List[Dict[str, Any]]:
        ...


def sanitize_database_url(url: str) -> str:
    # asyncpg rejects libpq-only query parameters such as sslmode.
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


class PostgresDatabase:
    def __init__(
        self,
        dsn: str,
        min_size: int = 1,
        max_size: int = 5,
        command_timeout: float = 30.0,
    ) -> None:
        self.dsn = dsn.strip()
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: Optional[asyncpg.Pool] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "PostgresDatabase":
        return cls(
            dsn=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )

    async def connect(self) -> None:
        if self._pool is not None:
            return None
        if not self.dsn:
            raise RuntimeError("DATABASE_URL is not set.")
        self._pool = await asyncpg.create_pool(
            dsn=sanitize_database_url(self.dsn),
            min_size=self.min_size,
            max_size=self.max_size,
            command_timeout=self.command_timeout,
        )
        logger.info("Opened database pool (min=%s, max=%s)", self.min_size, self.max_size)

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None
        logger.info("Closed database pool")

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call connect() on startup.")
        return self._pool

    async def fetch_all(self, sql: str, *args: Any) -> List[Dict[str, Any]]:
        """
        Run a query on a pooled connection and return all rows as dicts.

        The connection goes back to the pool whether the query succeeds or not.
        """
        async with self.pool.acquire() as connection:
            rows = await connection.fetch(sql, *args, timeout=self.command_timeout)
        return [dict(row) for row in rows]
