"""PostgreSQL connection pool for the progress store"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from momentum import config
from momentum.exceptions import ConnectionError, wrap_external_exception

logger = logging.getLogger(__name__)


class Database:
    """
    Owns the async connection pool.

    Connections hand out rows as dicts; PostgresProgressStore relies on it.
    Pool sizes default to DB_POOL_MIN_SIZE / DB_POOL_MAX_SIZE.
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None
    ):
        self.connection_string = connection_string or config.DATABASE_URL
        self.min_size = min_size or config.DB_POOL_MIN_SIZE
        self.max_size = max_size or config.DB_POOL_MAX_SIZE
        self._pool: Optional[AsyncConnectionPool] = None

    @property
    def is_initialized(self) -> bool:
        return self._pool is not None

    async def init_pool(self) -> None:
        logger.info(f"Opening progress store pool (min={self.min_size}, max={self.max_size})")
        self._pool = AsyncConnectionPool(
            self.connection_string,
            min_size=self.min_size,
            max_size=self.max_size,
            kwargs={"row_factory": dict_row},
            open=False
        )
        await self._pool.open()

    async def close_pool(self) -> None:
        if self._pool:
            logger.info("Closing progress store pool")
            await self._pool.close()
            self._pool = None

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        if not self._pool:
            raise ConnectionError("Progress store pool not initialized", operation="connection")

        async with self._pool.connection() as conn:
            yield conn

    async def ping(self) -> bool:
        """True when a pooled connection answers SELECT 1"""
        try:
            async with self.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute("SELECT 1")
                    await cur.fetchone()
            return True
        except ConnectionError as e:
            logger.warning(f"Progress store ping failed: {e.message}")
            return False
        except psycopg.Error as e:
            error = wrap_external_exception(e, operation="ping")
            logger.warning(f"Progress store ping failed: {error.message}")
            return False


# Global database instance
db = Database()
