"""PostgreSQL database connection pool."""
from typing import Optional, Any
import asyncpg

from pokerbot.config import config
from pokerbot.utils.logger import get_logger

logger = get_logger(__name__)


class Database:
    """Async PostgreSQL connection pool manager shared by all tables."""

    _instance: Optional["Database"] = None
    _pool: Optional[asyncpg.Pool] = None

    def __new__(cls) -> "Database":
        """Singleton pattern for database connection."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    async def connect(self, dsn: Optional[str] = None) -> None:
        """Create connection pool.

        Args:
            dsn: Connection string, defaults to ``DATABASE_URL``.
        """
        if self._pool is None:
            self._pool = await asyncpg.create_pool(
                dsn or config.database_url,
                min_size=1,
                max_size=5,
            )
            logger.info("Connected to PostgreSQL")

    async def disconnect(self) -> None:
        """Close connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Disconnected from PostgreSQL")

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    @property
    def pool(self) -> asyncpg.Pool:
        """Get connection pool, raise if not connected."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    async def execute(self, query: str, *args: Any) -> str:
        """Execute a query without returning results."""
        async with self.pool.acquire() as conn:
            return await conn.execute(query, *args)

    async def executemany(self, query: str, args: list[tuple]) -> None:
        """Execute a query once per argument tuple in a single transaction."""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.executemany(query, args)

    async def fetchrow(self, query: str, *args: Any) -> Optional[asyncpg.Record]:
        """Execute a query and return first result."""
        async with self.pool.acquire() as conn:
            return await conn.fetchrow(query, *args)


# Global instance
db = Database()
