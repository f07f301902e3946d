"""Redis connection shared by every ledger repository."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError


class HasDatabaseSettings(Protocol):
    database_url: str


class DatabaseClient:
    """Owns the async Redis client (and its connection pool) for one process.

    Balances, request records and vaults all live in the same logical
    database, which is what lets a single script touch all of them at once.
    """

    def __init__(self, settings: HasDatabaseSettings):
        self.settings = settings
        self._redis: Optional[redis.Redis] = None

    def initialize_database(self) -> None:
        # URL like redis://host:port/db; responses decoded so scripts return str
        self._redis = redis.from_url(self.settings.database_url, decode_responses=True)

    @asynccontextmanager
    async def get_connection(self) -> AsyncGenerator[redis.Redis, None]:
        if self._redis is None:
            self.initialize_database()
        assert self._redis is not None
        yield self._redis

    async def is_available(self) -> bool:
        """Round-trip a PING; False when the server cannot be reached."""
        try:
            async with self.get_connection() as conn:
                return bool(await conn.ping())
        except (RedisError, OSError):
            return False

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
