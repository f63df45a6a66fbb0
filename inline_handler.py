"""
Central Inline Button Router
Routes inline keyboard callbacks to the handler that owns them
"""

import logging
from typing import Any, Dict

from aiogram import Bot
from aiogram.types import CallbackQuery

from core.config.config import Config
from core.database.unified_database import DatabaseManager

logger = logging.getLogger(__name__)

NODE_STATUS = "node_status"


class InlineHandler:
    """Central router for all inline button callbacks"""

    def __init__(self, bot: Bot, db_manager: DatabaseManager, config: Config):
        self.bot = bot
        self.db_manager = db_manager
        self.config = config
        self.handlers: Dict[str, Any] = {}

    def register_handler(self, prefix: str, handler: Any):
        """Register a handler for a callback family"""
        self.handlers[prefix] = handler
        logger.info(f"✅ Registered inline handler for: {prefix}")

    async def handle_callback(self, callback: CallbackQuery):
        """Route a callback; node card payloads have the form '<telegram_id>-<index>'"""
        try:
            user_id = callback.from_user.id
            username = callback.from_user.username or "Unknown"
            logger.info(f"🔘 BUTTON PRESSED: User {user_id} (@{username}) clicked '{callback.data}'")

            handler = self.handlers.get(NODE_STATUS)
            if handler is None:
                logger.warning(f"❓ UNKNOWN CALLBACK: '{callback.data}' from user {user_id}")
                await callback.answer()
                return

            await handler.handle_callback(callback)

        except Exception as e:
            logger.error(f"❌ CALLBACK ERROR: Error handling callback '{callback.data}' "
                         f"from user {callback.from_user.id}: {e}")
            try:
                if "query is too old" in str(e) or "timeout expired" in str(e):
                    logger.info("⏰ EXPIRED CALLBACK: Ignoring expired callback query")
                    return
                await callback.answer("❌ An error occurred. Please try again.", show_alert=True)
            except Exception as answer_error:
                logger.info(f"⚠️ CALLBACK ANSWER FAILED: Could not answer callback (likely expired): {answer_error}")
