"""PostgreSQL connection pool for the postgres store backend"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional
import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool
from studyquest.config import DATABASE_URL, DB_POOL_MIN_SIZE, DB_POOL_MAX_SIZE
from studyquest.exceptions import ConnectionError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")


class Database:
    """Owns one AsyncConnectionPool; query modules borrow dict_row connections from it"""

    def __init__(self, connection_string: str = DATABASE_URL):
        self.connection_string = connection_string
        self._pool: Optional[AsyncConnectionPool] = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    async def init_pool(self) -> None:
        """Open the pool and wait for its minimum connections; no-op when already open"""
        if self._pool is not None:
            return

        logger.info(f"Opening database pool (min={DB_POOL_MIN_SIZE}, max={DB_POOL_MAX_SIZE})")
        pool = AsyncConnectionPool(
            self.connection_string,
            min_size=DB_POOL_MIN_SIZE,
            max_size=DB_POOL_MAX_SIZE,
            open=False
        )
        await pool.open(wait=True)
        self._pool = pool

    async def close_pool(self) -> None:
        if self._pool:
            logger.info("Closing database pool")
            await self._pool.close()
            self._pool = None

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """Borrow a connection with dict rows; returned to the pool on exit"""
        if self._pool is None:
            raise ConnectionError(
                message="Database pool is not open, call init_app() first",
                operation="connection",
            )

        async with self._pool.connection() as conn:
            conn.row_factory = dict_row
            yield conn

    async def apply_schema(self) -> None:
        """Create tables, constraints and the study session trigger"""
        logger.info(f"Applying schema from {SCHEMA_PATH.name}")
        async with self.connection() as conn:
            await conn.execute(SCHEMA_PATH.read_text())
            await conn.commit()


# Shared by every query module
db = Database()
