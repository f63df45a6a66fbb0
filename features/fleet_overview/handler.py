"""
Fleet Overview Handler
/all_status: admin-only aggregate across every Komari site saved in this bot
"""

import logging

from aiogram.types import Message

from core.bot.base_handler import BaseFeatureHandler, reply_markdown, reply_plain
from core.utils.errors import KomariBotError
from .aggregator import FleetAggregator, format_fleet_overview

logger = logging.getLogger(__name__)


class FleetOverviewHandler(BaseFeatureHandler):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.aggregator = FleetAggregator(self.rpc)

    async def every_one_status(self) -> str:
        monitors = await self.db.get_all_monitors()
        result = await self.aggregator.collect(monitors)
        logger.info(f"📊 Fleet overview: {result.success_count}/{result.saved_count} sites answered")
        return format_fleet_overview(result, self.config.BOT_NAME)

    async def handle_all_status(self, message: Message, user_id: int):
        if not self.config.is_admin(user_id):
            logger.warning(f"🚫 Non-admin {user_id} requested the fleet overview")
            await reply_plain(message, "This command is for bot admins only")
            return

        try:
            text = await self.every_one_status()
        except KomariBotError as e:
            logger.error(f"Fleet overview failed: {e}")
            await reply_plain(message, f"Unable to build overview: {e}")
            return

        await reply_markdown(message, text)
