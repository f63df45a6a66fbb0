"""
Node Status Handler
/get_node_id, /status, /status_id and the pagination callbacks of the node card
"""

import logging
from typing import List, Optional, Tuple

from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from core.bot.base_handler import BaseFeatureHandler, NO_PREVIEW, reply_markdown, reply_plain
from core.komari.models import AllInfo, NodeInfo, NodeStatus
from core.utils.errors import InvalidCallbackDataError, KomariBotError, NodeNotFoundError
from core.utils.formatting import (
    bytes_per_second_to_mbps,
    bytes_to_pretty_string,
    escape_message,
    seconds_to_pretty_duration,
    usage_percent,
)
from .keyboards import NodeStatusKeyboards, parse_callback_data

logger = logging.getLogger(__name__)

UNKNOWN_NODE = "unknown node"


def build_node_id_list(all_info: AllInfo) -> Tuple[str, List[Tuple[str, str]]]:
    """Number nodes from 1 in uuid order; returns the listing text and (uuid, name) pairs"""
    entries = []
    lines = []
    for counter, (node_uuid, _) in enumerate(all_info.sorted_status(), start=1):
        node = all_info.find_node(node_uuid)
        name = node.name if node else UNKNOWN_NODE
        entries.append((node_uuid, name))
        lines.append(f"`{counter}` - {name}")
    return "\n".join(lines), entries


def resolve_node_index(index: int) -> int:
    """User-facing node id to list position; 0 and 1 both select the first node"""
    return 0 if index <= 1 else index - 1


def find_node_id_by_name(all_info: AllInfo, name: str) -> int:
    """Id of the first node (in listing order) whose name contains name"""
    _, entries = build_node_id_list(all_info)
    for counter, (_, node_name) in enumerate(entries, start=1):
        if name in node_name:
            return counter
    raise NodeNotFoundError(f"no node name contains '{name}'")


def format_node_status(all_info: AllInfo, node: NodeInfo, status: NodeStatus) -> str:
    gpu_line = f"\nGPU: `{node.gpu_name}`" if node.gpu_name else ""
    update_at = f"\n\nUPDATE AT: `{node.updated_at}`" if node.updated_at else ""

    return (
        f"{all_info.public_info.sitename} | {node.region} | {node.name}\n"
        "\n"
        f"CPU: `{node.cpu_name}` @ `{node.cpu_cores} Cores`{gpu_line}\n"
        f"ARCH: `{node.arch}`\n"
        f"VIRT: `{node.virtualization}`\n"
        f"OS: `{node.os}`\n"
        f"KERN: `{node.kernel_version}`\n"
        f"UPTIME: `{seconds_to_pretty_duration(status.uptime)}`\n"
        "\n"
        f"CPU: `{status.cpu:.2f}%`\n"
        f"RAM: `{bytes_to_pretty_string(status.ram)}` / `{bytes_to_pretty_string(status.ram_total)}` "
        f"`{usage_percent(status.ram, status.ram_total):.2f}%`\n"
        f"SWAP: `{bytes_to_pretty_string(status.swap)}` / `{bytes_to_pretty_string(status.swap_total)}` "
        f"`{usage_percent(status.swap, status.swap_total):.2f}%`\n"
        f"DISK: `{bytes_to_pretty_string(status.disk)}` / `{bytes_to_pretty_string(status.disk_total)}` "
        f"`{usage_percent(status.disk, status.disk_total):.2f}%`\n"
        "\n"
        f"LOAD: `{status.load:.2f}` / `{status.load5:.2f}` / `{status.load15:.2f}`\n"
        f"PROC: `{status.process}`\n"
        "\n"
        f"NET: `{bytes_to_pretty_string(status.net_total_down)}` / `{bytes_to_pretty_string(status.net_total_up)}`\n"
        f"UP: `{bytes_per_second_to_mbps(status.net_out):.2f} Mbps`\n"
        f"DOWN: `{bytes_per_second_to_mbps(status.net_in):.2f} Mbps`\n"
        f"CONN: `{status.connections} TCP` / `{status.connections_udp} UDP`"
        f"{update_at}"
    )


def render_node_status(all_info: AllInfo, index: int) -> str:
    """Card for the node with user-facing id index"""
    ordered = all_info.sorted_status()
    position = resolve_node_index(index)
    if index < 0 or position >= len(ordered):
        raise NodeNotFoundError(f"node {index} does not exist")

    node_uuid, status = ordered[position]
    node = all_info.find_node(node_uuid)
    if node is None:
        raise NodeNotFoundError(
            "no server with this UUID, it may have been created in Komari without reporting yet"
        )
    return format_node_status(all_info, node, status)


class NodeStatusHandler(BaseFeatureHandler):
    """Per-node status card with pagination"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.keyboards = NodeStatusKeyboards(self.config.BOT_NAME)

    async def get_node_id_list(self, telegram_id: int) -> str:
        _, all_info = await self.fetch_for_user(telegram_id)
        text, _ = build_node_id_list(all_info)
        return text

    async def status_with_id(self, telegram_id: int, index: int) -> Tuple[str, InlineKeyboardMarkup]:
        _, all_info = await self.fetch_for_user(telegram_id)
        text = render_node_status(all_info, index)
        keyboard = self.keyboards.get_pagination_keyboard(index, telegram_id, len(all_info.nodes))
        return text, keyboard

    async def status_by_name(self, telegram_id: int, name: str) -> Tuple[str, InlineKeyboardMarkup]:
        _, all_info = await self.fetch_for_user(telegram_id)
        index = find_node_id_by_name(all_info, name)
        text = render_node_status(all_info, index)
        keyboard = self.keyboards.get_pagination_keyboard(index, telegram_id, len(all_info.nodes))
        return text, keyboard

    async def handle_get_node_id(self, message: Message, telegram_id: int):
        try:
            text = await self.get_node_id_list(telegram_id)
        except KomariBotError as e:
            logger.error(f"get_node_id failed for {telegram_id}: {e}")
            await reply_plain(message, f"Unable to get node IDs: {e}")
            return

        await reply_markdown(message, text or "No nodes reported yet")

    async def handle_status_id(self, message: Message, telegram_id: int, index: int):
        await self._reply_status(message, telegram_id, self.status_with_id(telegram_id, index))

    async def handle_status(self, message: Message, telegram_id: int, name: str):
        await self._reply_status(message, telegram_id, self.status_by_name(telegram_id, name))

    async def _reply_status(self, message: Message, telegram_id: int, pending):
        try:
            text, keyboard = await pending
        except KomariBotError as e:
            logger.error(f"Status failed for {telegram_id}: {e}")
            await reply_plain(message, f"Unable to read Komari data: {e}")
            return

        await reply_markdown(message, text, reply_markup=keyboard)

    async def handle_callback(self, callback: CallbackQuery):
        """Re-render the card for the index carried in the callback payload"""
        try:
            owner_id, index = parse_callback_data(callback.data)
        except InvalidCallbackDataError as e:
            logger.warning(f"❓ {e} from user {callback.from_user.id}")
            await callback.answer(str(e))
            return

        await callback.answer()

        if owner_id != callback.from_user.id:
            logger.info(f"🚫 User {callback.from_user.id} pressed a keyboard owned by {owner_id}")
            return

        try:
            text, keyboard = await self.status_with_id(owner_id, index)
            await self._edit(callback, escape_message(text), keyboard, ParseMode.MARKDOWN_V2)
        except KomariBotError as e:
            logger.error(f"Status callback failed for {owner_id}: {e}")
            await self._edit(callback, f"Unable to read Komari data: {e}", None, None)

    async def _edit(self, callback: CallbackQuery, text: str,
                    keyboard: Optional[InlineKeyboardMarkup], parse_mode: Optional[str]):
        try:
            if isinstance(callback.message, Message):
                await callback.message.edit_text(
                    text,
                    parse_mode=parse_mode,
                    reply_markup=keyboard,
                    link_preview_options=NO_PREVIEW
                )
            elif callback.inline_message_id:
                await self.bot.edit_message_text(
                    text=text,
                    inline_message_id=callback.inline_message_id,
                    parse_mode=parse_mode,
                    reply_markup=keyboard,
                    link_preview_options=NO_PREVIEW
                )
        except TelegramBadRequest as e:
            if "message is not modified" in str(e):
                logger.debug("Refresh produced identical content")
                return
            raise
