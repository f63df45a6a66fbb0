"""
Database Coordinator
Owns the asyncpg pool, creates the monitors schema and pings the server periodically
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import asyncpg

from core.config.config import Config

logger = logging.getLogger(__name__)


SCHEMA_QUERIES = [
    """
    CREATE TABLE IF NOT EXISTS monitors (
        telegram_id BIGINT PRIMARY KEY,
        monitor_url TEXT NOT NULL,
        notification_token TEXT,
        created_at TIMESTAMP DEFAULT NOW(),
        updated_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_monitors_notification_token
    ON monitors (notification_token) WHERE notification_token IS NOT NULL
    """,
]

# Failures of the server or of the connection to it
DATABASE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError, OSError)


class DatabaseCoordinator:
    """Pool lifecycle plus thin query helpers returning plain dicts"""

    def __init__(self, config: Config):
        self.config = config
        self.pool: Optional[asyncpg.Pool] = None
        self._ping_task: Optional[asyncio.Task] = None

    async def initialize(self):
        """Open the pool, verify it and make sure the schema exists"""
        logger.info("🔗 Opening PostgreSQL pool...")
        try:
            self.pool = await asyncpg.create_pool(
                **self.config.get_database_config(),
                server_settings={
                    'application_name': 'komari_tg_bot',
                    'timezone': 'UTC'
                }
            )
            async with self.pool.acquire() as conn:
                db_name = await conn.fetchval("SELECT current_database()")
                logger.info(f"✅ Connected to database: {db_name}")
                for query in SCHEMA_QUERIES:
                    await conn.execute(query)
            logger.info(f"🛠️ Monitors schema ready ({len(SCHEMA_QUERIES)} statements)")
        except Exception as e:
            logger.error(f"❌ Database startup failed: {e}")
            raise

        self._ping_task = asyncio.create_task(self._ping_loop())

    @asynccontextmanager
    async def connection(self):
        """Borrow a pooled connection"""
        if not self.pool:
            raise RuntimeError("Database pool not initialized")
        async with self.pool.acquire() as conn:
            yield conn

    async def execute(self, query: str, *args) -> str:
        """Run a statement and return its status tag, e.g. 'DELETE 1'"""
        async with self.connection() as conn:
            return await conn.execute(query, *args)

    async def fetch_one(self, query: str, *args) -> Optional[Dict[str, Any]]:
        async with self.connection() as conn:
            row = await conn.fetchrow(query, *args)
        return dict(row) if row else None

    async def fetch_all(self, query: str, *args) -> List[Dict[str, Any]]:
        async with self.connection() as conn:
            rows = await conn.fetch(query, *args)
        return [dict(row) for row in rows]

    @asynccontextmanager
    async def transaction(self):
        async with self.connection() as conn:
            async with conn.transaction():
                yield conn

    async def _ping_loop(self):
        interval = self.config.HEALTH_CHECK_INTERVAL
        logger.info(f"💓 Database ping every {interval}s")
        while True:
            await asyncio.sleep(interval)
            try:
                async with self.connection() as conn:
                    await conn.fetchval("SELECT 1")
                logger.debug(f"Database ping OK, pool size {self.pool.get_size()}")
            except DATABASE_ERRORS as e:
                logger.error(f"Database ping failed: {e}")

    async def close(self):
        if self._ping_task:
            self._ping_task.cancel()
            try:
                await self._ping_task
            except asyncio.CancelledError:
                pass
            self._ping_task = None

        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("✅ Database pool closed")
