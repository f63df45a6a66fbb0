"""
Connection Handler
/connect, /disconnect and /update: manage the user's saved Komari site
"""

import logging
from urllib.parse import urlsplit

from aiogram.types import Message

from core.bot.base_handler import BaseFeatureHandler, reply_markdown, reply_plain
from core.komari.models import AllInfo
from core.utils.errors import KomariBotError, UserNotConnectedError
from core.utils.formatting import bytes_to_pretty_string

logger = logging.getLogger(__name__)


class InvalidURLError(ValueError):
    pass


def normalize_url(http_url: str) -> str:
    """Reduce a site URL to scheme://host[:port]"""
    try:
        parts = urlsplit(http_url.strip())
        port = parts.port
    except ValueError as e:
        raise InvalidURLError(str(e)) from e

    if not parts.scheme or not parts.hostname:
        raise InvalidURLError("missing scheme or host")
    if parts.scheme not in ("http", "https"):
        raise InvalidURLError(f"unsupported scheme {parts.scheme}")

    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    port_part = f":{port}" if port is not None else ""
    return f"{parts.scheme}://{host}{port_part}"


def format_site_summary(all_info: AllInfo) -> str:
    nodes = all_info.nodes.values()
    return (
        "Successfully read Komari site info!\n"
        f"Site name: `{all_info.public_info.sitename}`\n"
        f"Site description: `{all_info.public_info.description}`\n"
        f"Site version: `{all_info.version.version}-{all_info.version.hash}`\n"
        "\n"
        f"Nodes: `{len(all_info.nodes)}`\n"
        f"Total CPU cores: `{sum(node.cpu_cores for node in nodes)}`\n"
        f"Total memory: `{bytes_to_pretty_string(sum(node.mem_total for node in nodes))}`\n"
        f"Total swap: `{bytes_to_pretty_string(sum(node.swap_total for node in nodes))}`\n"
        f"Total disk: `{bytes_to_pretty_string(sum(node.disk_total for node in nodes))}`"
    )


class ConnectionHandler(BaseFeatureHandler):
    """Registers, refreshes and removes monitor connections"""

    async def connect(self, telegram_id: int, http_url: str) -> str:
        """Fetch the site first, then replace the stored registration"""
        all_info = await self.rpc.get_all_info(http_url)
        await self.db.replace_monitor(telegram_id, http_url)
        return format_site_summary(all_info)

    async def update(self, telegram_id: int) -> str:
        monitor = await self.db.get_monitor(telegram_id)
        if monitor is None:
            raise UserNotConnectedError()
        return await self.connect(telegram_id, monitor.monitor_url)

    async def handle_connect(self, message: Message, telegram_id: int, http_url: str):
        try:
            normalized = normalize_url(http_url)
        except InvalidURLError as e:
            await reply_plain(message, f"Invalid URL: {e}")
            return

        try:
            text = await self.connect(telegram_id, normalized)
        except KomariBotError as e:
            logger.error(f"Connect failed for {telegram_id} ({normalized}): {e}")
            await reply_plain(message, f"Failed to fetch site info: {e}")
            return

        logger.info(f"🔗 User {telegram_id} connected to {normalized}")
        await reply_markdown(message, text)

    async def handle_update(self, message: Message, telegram_id: int):
        try:
            text = await self.update(telegram_id)
        except KomariBotError as e:
            logger.error(f"Update failed for {telegram_id}: {e}")
            await reply_plain(message, f"Failed to fetch site info: {e}")
            return

        await reply_markdown(message, text)

    async def handle_disconnect(self, message: Message, telegram_id: int):
        try:
            await self.db.delete_monitor(telegram_id)
        except KomariBotError as e:
            logger.error(f"Disconnect failed for {telegram_id}: {e}")
            await reply_plain(message, f"Failed to disconnect from Komari: {e}")
            return

        logger.info(f"🔌 User {telegram_id} disconnected")
        await reply_plain(message, "Disconnected from Komari")
