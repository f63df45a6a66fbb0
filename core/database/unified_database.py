"""
Unified Database Manager
Monitor registrations: one row per Telegram identity
"""

import logging
from dataclasses import dataclass
from typing import Dict, Any, Optional, List

from core.config.config import Config
from core.utils.errors import DatabaseError
from .coordinator import DATABASE_ERRORS, DatabaseCoordinator

logger = logging.getLogger(__name__)


@dataclass
class Monitor:
    """A registered (telegram identity, Komari site) pair"""
    telegram_id: int
    monitor_url: str
    notification_token: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Monitor":
        return cls(
            telegram_id=row['telegram_id'],
            monitor_url=row['monitor_url'],
            notification_token=row.get('notification_token')
        )


class DatabaseManager:
    """Database manager for monitor registrations"""

    def __init__(self, config: Config, coordinator: Optional[DatabaseCoordinator] = None):
        self.config = config
        self.coordinator = coordinator or DatabaseCoordinator(config)
        self._initialized = False

    async def initialize(self):
        """Initialize database manager"""
        if self._initialized:
            return

        try:
            await self.coordinator.initialize()
            self._initialized = True
            logger.info("✅ Database manager initialized")
        except Exception as e:
            logger.error(f"Failed to initialize database manager: {e}")
            raise

    def _ensure_initialized(self):
        if not self._initialized:
            raise DatabaseError("database manager not initialized")

    async def replace_monitor(self, telegram_id: int, monitor_url: str):
        """Drop any existing registration and store a fresh one without a token"""
        self._ensure_initialized()
        try:
            async with self.coordinator.transaction() as conn:
                await conn.execute("DELETE FROM monitors WHERE telegram_id = $1", telegram_id)
                await conn.execute(
                    """
                    INSERT INTO monitors (telegram_id, monitor_url, notification_token, created_at, updated_at)
                    VALUES ($1, $2, NULL, NOW(), NOW())
                    """,
                    telegram_id, monitor_url
                )
        except DATABASE_ERRORS as e:
            logger.error(f"Failed to save monitor for {telegram_id}: {e}")
            raise DatabaseError(str(e) or e.__class__.__name__) from e

        logger.info(f"💾 Monitor saved for {telegram_id}: {monitor_url}")

    async def delete_monitor(self, telegram_id: int) -> bool:
        """Delete registration, returns whether a row existed"""
        self._ensure_initialized()
        try:
            status = await self.coordinator.execute(
                "DELETE FROM monitors WHERE telegram_id = $1", telegram_id
            )
        except DATABASE_ERRORS as e:
            logger.error(f"Failed to delete monitor for {telegram_id}: {e}")
            raise DatabaseError(str(e) or e.__class__.__name__) from e
        return status != "DELETE 0"

    async def get_monitor(self, telegram_id: int) -> Optional[Monitor]:
        self._ensure_initialized()
        try:
            row = await self.coordinator.fetch_one(
                "SELECT * FROM monitors WHERE telegram_id = $1", telegram_id
            )
        except DATABASE_ERRORS as e:
            raise DatabaseError(str(e) or e.__class__.__name__) from e
        return Monitor.from_row(row) if row else None

    async def get_all_monitors(self) -> List[Monitor]:
        self._ensure_initialized()
        try:
            rows = await self.coordinator.fetch_all(
                "SELECT * FROM monitors ORDER BY telegram_id"
            )
        except DATABASE_ERRORS as e:
            raise DatabaseError(str(e) or e.__class__.__name__) from e
        return [Monitor.from_row(row) for row in rows]

    async def set_notification_token(self, telegram_id: int, token: str) -> bool:
        """Store token on an existing registration, returns False when none exists"""
        self._ensure_initialized()
        try:
            status = await self.coordinator.execute(
                """
                UPDATE monitors SET notification_token = $2, updated_at = NOW()
                WHERE telegram_id = $1
                """,
                telegram_id, token
            )
        except DATABASE_ERRORS as e:
            logger.error(f"Failed to store notification token for {telegram_id}: {e}")
            raise DatabaseError(str(e) or e.__class__.__name__) from e
        return status != "UPDATE 0"

    async def close(self):
        """Close database connections"""
        await self.coordinator.close()
        self._initialized = False
