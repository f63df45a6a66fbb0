"""
Telegram Bot Core Implementation
Main bot controller: command parsing, feature routing and the notification webhook
"""

import logging
from typing import Dict, Any, Optional

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.types import Message

from core.bot.base_handler import NO_PREVIEW, reply_plain
from core.bot.commands import Command, CommandParseError, CommandType, parse_command
from core.config.config import Config
from core.database.unified_database import DatabaseManager
from core.komari.rpc_client import KomariRPCClient, komari_client
from core.webhook.server import NotificationWebhookServer
from inline_handler import InlineHandler, NODE_STATUS

from features.connection.handler import ConnectionHandler
from features.node_status.handler import NodeStatusHandler
from features.total_status.handler import TotalStatusHandler
from features.fleet_overview.handler import FleetOverviewHandler
from features.notifications.handler import NotificationHandler

logger = logging.getLogger(__name__)

START_TEXT = (
    "Welcome to Komari Unofficial Telegram Bot\n"
    "\n"
    "Send /help to see how to use it\n"
    "\n"
    "> This bot is open source on [GitHub](https://github.com/GenshinMinecraft/komari-tg-bot), "
    "with love from [Komari](https://github.com/komari-monitor/komari)"
)

HELP_TEXT = """Komari Unofficial Telegram Bot
/start, /help - show this menu

/connect HTTP_URL - connect to a Komari site
/disconnect - remove the saved connection
/update - refresh the saved connection (after adding or removing servers)

/total_status - overview of every node
/status NODE_NAME - status of the first node whose name contains NODE_NAME (same as /status_id 1 without a name)
/get_node_id - list node IDs (as used by this bot)
/status_id NODE_ID - status of the node with this ID (see /get_node_id)

/generate_notification_token - create the webhook URL for Komari notifications
"""


class TelegramBot:
    """Main Telegram Bot Controller"""

    def __init__(self, config: Config, db_manager: DatabaseManager,
                 rpc_client: Optional[KomariRPCClient] = None):
        self.config = config
        self.db_manager = db_manager
        self.rpc_client = rpc_client or komari_client
        self.bot: Optional[Bot] = None
        self.dp: Optional[Dispatcher] = None
        self.handlers: Dict[str, Any] = {}
        self.inline_handler: Optional[InlineHandler] = None
        self.webhook_server: Optional[NotificationWebhookServer] = None

    async def initialize(self):
        """Initialize bot and all handlers"""
        try:
            self.bot = Bot(
                token=self.config.BOT_TOKEN,
                default=DefaultBotProperties(link_preview_is_disabled=True)
            )
            self.dp = Dispatcher()

            self.inline_handler = InlineHandler(self.bot, self.db_manager, self.config)
            await self._initialize_handlers()
            self._register_routes()

            self.webhook_server = NotificationWebhookServer(self.bot, self.db_manager, self.config)

            logger.info("✅ Bot initialization completed")

        except Exception as e:
            logger.error(f"Failed to initialize bot: {e}")
            raise

    async def _initialize_handlers(self):
        """Create and initialize every feature handler"""
        if self.bot is None:
            raise RuntimeError("Bot instance not initialized")

        args = (self.bot, self.db_manager, self.config, self.rpc_client)
        self.handlers['connection'] = ConnectionHandler(*args)
        self.handlers['node_status'] = NodeStatusHandler(*args)
        self.handlers['total_status'] = TotalStatusHandler(*args)
        self.handlers['fleet_overview'] = FleetOverviewHandler(*args)
        self.handlers['notifications'] = NotificationHandler(*args)

        for handler in self.handlers.values():
            await handler.initialize()

    def _register_routes(self):
        """Register message and callback routes"""
        if self.dp is None:
            raise RuntimeError("Dispatcher not initialized")

        self.dp.message.register(self._handle_message)
        self.dp.callback_query.register(self.inline_handler.handle_callback)
        self.inline_handler.register_handler(NODE_STATUS, self.handlers['node_status'])

        logger.info("✅ All routes registered successfully")

    async def _handle_message(self, message: Message):
        """Parse a chat message and dispatch the command it carries"""
        if message.from_user is None or message.sender_chat is not None:
            return

        try:
            command = parse_command(message.text, self.config.BOT_NAME)
        except CommandParseError as e:
            await reply_plain(message, str(e))
            return

        if command is None:
            return

        user_id = message.from_user.id
        username = message.from_user.username or "Unknown"
        logger.info(f"👤 USER INTERACTION: User {user_id} (@{username}) sent /{command.type.value}")

        try:
            await self.dispatch_command(message, command, user_id)
        except Exception as e:
            logger.error(f"Error handling /{command.type.value} for {user_id}: {e}", exc_info=True)
            await reply_plain(message, f"❌ An error occurred: {e}")

    async def dispatch_command(self, message: Message, command: Command, telegram_id: int):
        connection = self.handlers['connection']
        node_status = self.handlers['node_status']

        if command.type == CommandType.START:
            await message.reply(START_TEXT, parse_mode=ParseMode.MARKDOWN_V2, link_preview_options=NO_PREVIEW)
        elif command.type == CommandType.HELP:
            await reply_plain(message, HELP_TEXT)
        elif command.type == CommandType.CONNECT:
            await connection.handle_connect(message, telegram_id, command.http_url)
        elif command.type == CommandType.DISCONNECT:
            await connection.handle_disconnect(message, telegram_id)
        elif command.type == CommandType.UPDATE:
            await connection.handle_update(message, telegram_id)
        elif command.type == CommandType.GET_NODE_ID:
            await node_status.handle_get_node_id(message, telegram_id)
        elif command.type == CommandType.STATUS_ID:
            await node_status.handle_status_id(message, telegram_id, command.node_id)
        elif command.type == CommandType.STATUS:
            await node_status.handle_status(message, telegram_id, command.node_name)
        elif command.type == CommandType.TOTAL_STATUS:
            await self.handlers['total_status'].handle_total_status(message, telegram_id)
        elif command.type == CommandType.GENERATE_NOTIFICATION_TOKEN:
            await self.handlers['notifications'].handle_generate(message, telegram_id)
        elif command.type == CommandType.ALL_STATUS:
            await self.handlers['fleet_overview'].handle_all_status(message, telegram_id)

    async def start(self):
        """Start the webhook server and long polling"""
        if self.dp is None or self.bot is None:
            raise RuntimeError("Bot or dispatcher not initialized")

        await self.webhook_server.start()
        logger.info("🎯 Starting bot polling...")
        await self.dp.start_polling(self.bot)

    async def shutdown(self):
        """Shutdown the bot gracefully"""
        try:
            logger.info("⏹️ Shutting down bot...")

            if self.webhook_server:
                await self.webhook_server.shutdown()

            if self.bot:
                await self.bot.session.close()

            logger.info("✅ Bot shutdown completed")

        except Exception as e:
            logger.error(f"Error during shutdown: {e}")
