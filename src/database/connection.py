"""
Database connection and pool management
"""

import json
import logging
from typing import Optional

import asyncpg
from fastapi import Request

from config.settings import DATABASE_URL, DB_POOL_MIN_SIZE, DB_POOL_MAX_SIZE, DB_COMMAND_TIMEOUT
from database.collections import COLLECTIONS, DocumentCollection

logger = logging.getLogger(__name__)

# Every collection is a table holding one JSONB document per row.
# seq keeps insertion order for listings.
CREATE_COLLECTION_SQL = """
CREATE TABLE IF NOT EXISTS {name} (
    _id TEXT PRIMARY KEY,
    seq BIGSERIAL,
    doc JSONB NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""

# Usernames are unique across users
CREATE_INDEXES_SQL = [
    "CREATE UNIQUE INDEX IF NOT EXISTS users_username_key ON users ((doc ->> 'username'))",
]


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode and encode JSONB columns as Python objects"""
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog"
    )


class Database:
    """Handle on the document store, opened at startup and closed at shutdown"""

    def __init__(
        self,
        dsn: Optional[str] = None,
        min_size: int = DB_POOL_MIN_SIZE,
        max_size: int = DB_POOL_MAX_SIZE,
        command_timeout: float = DB_COMMAND_TIMEOUT
    ):
        self.dsn = dsn or DATABASE_URL
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self.pool: Optional[asyncpg.Pool] = None

    async def connect(self):
        """Initialize database connection pool and collection tables"""
        if not self.dsn:
            raise ValueError("DATABASE_URL environment variable is required")

        self.pool = await asyncpg.create_pool(
            self.dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            command_timeout=self.command_timeout,
            statement_cache_size=0,  # pgbouncer compatibility
            init=_init_connection
        )

        async with self.pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
            for name in COLLECTIONS:
                await conn.execute(CREATE_COLLECTION_SQL.format(name=name))
            for statement in CREATE_INDEXES_SQL:
                await conn.execute(statement)

        logger.info("Database initialized successfully")

    async def close(self):
        """Close database connection pool"""
        if self.pool:
            await self.pool.close()
            self.pool = None
        logger.info("Database connections closed")

    async def ping(self):
        async with self.acquire() as conn:
            await conn.fetchval("SELECT 1")

    def acquire(self):
        """Acquire a pooled connection (async context manager)"""
        if self.pool is None:
            raise RuntimeError("Database pool not initialized")
        return self.pool.acquire()

    def collection(self, name: str) -> DocumentCollection:
        return DocumentCollection(self, name)


def get_database(request: Request):
    """FastAPI dependency returning the database handle bound to the app"""
    return request.app.state.database
