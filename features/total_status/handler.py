"""
Total Status Handler
/total_status: site-wide overview of every node of the user's Komari
"""

import logging

from aiogram.types import Message

from core.bot.base_handler import BaseFeatureHandler, reply_markdown, reply_plain
from core.komari.aggregate import AggregateMetrics
from core.komari.models import AllInfo
from core.utils.errors import KomariBotError

logger = logging.getLogger(__name__)


def format_total_status(all_info: AllInfo) -> str:
    metrics = AggregateMetrics.from_statuses(
        all_info.nodes_latest_status.values(),
        cpu_cores=all_info.total_cpu_cores
    )
    return f"{all_info.public_info.sitename} overview\n\n{metrics.format_body()}"


class TotalStatusHandler(BaseFeatureHandler):

    async def total_status(self, telegram_id: int) -> str:
        _, all_info = await self.fetch_for_user(telegram_id)
        return format_total_status(all_info)

    async def handle_total_status(self, message: Message, telegram_id: int):
        try:
            text = await self.total_status(telegram_id)
        except KomariBotError as e:
            logger.error(f"total_status failed for {telegram_id}: {e}")
            await reply_plain(message, f"Unable to read Komari data: {e}")
            return

        await reply_markdown(message, text)
