"""
Feature Handler Base
Shared wiring and reply helpers for command handlers
"""

import logging
from typing import Optional, Tuple

from aiogram import Bot
from aiogram.enums import ParseMode
from aiogram.types import InlineKeyboardMarkup, LinkPreviewOptions, Message

from core.config.config import Config
from core.database.unified_database import DatabaseManager, Monitor
from core.komari.models import AllInfo
from core.komari.rpc_client import KomariRPCClient, komari_client
from core.utils.errors import UserNotConnectedError
from core.utils.formatting import escape_message

logger = logging.getLogger(__name__)

NO_PREVIEW = LinkPreviewOptions(is_disabled=True)


async def reply_markdown(message: Message, text: str,
                         reply_markup: Optional[InlineKeyboardMarkup] = None) -> Message:
    """Escape a formatted body and reply with MarkdownV2"""
    return await message.reply(
        escape_message(text),
        parse_mode=ParseMode.MARKDOWN_V2,
        link_preview_options=NO_PREVIEW,
        reply_markup=reply_markup
    )


async def reply_plain(message: Message, text: str) -> Message:
    """Reply without any parse mode, used for error strings"""
    return await message.reply(text, parse_mode=None, link_preview_options=NO_PREVIEW)


class BaseFeatureHandler:
    """Common constructor and monitor lookup for feature handlers"""

    def __init__(self, bot: Bot, db_manager: DatabaseManager, config: Config,
                 rpc_client: Optional[KomariRPCClient] = None):
        self.bot = bot
        self.db = db_manager
        self.config = config
        self.rpc = rpc_client or komari_client

    async def initialize(self):
        logger.info(f"✅ {self.__class__.__name__} initialized")

    async def require_monitor(self, telegram_id: int) -> Monitor:
        monitor = await self.db.get_monitor(telegram_id)
        if monitor is None:
            raise UserNotConnectedError()
        return monitor

    async def fetch_for_user(self, telegram_id: int) -> Tuple[Monitor, AllInfo]:
        """Fetch a fresh AllInfo for the user's registered site"""
        monitor = await self.require_monitor(telegram_id)
        all_info = await self.rpc.get_all_info(monitor.monitor_url)
        return monitor, all_info
