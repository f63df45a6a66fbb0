"""
Notification Token Handler
/generate_notification_token: issue the per-user webhook URL for Komari push notifications
"""

import logging
import secrets

from aiogram.enums import ChatType
from aiogram.types import Message

from core.bot.base_handler import BaseFeatureHandler, reply_markdown, reply_plain
from core.utils.errors import KomariBotError, UserNotConnectedError

logger = logging.getLogger(__name__)

TOKEN_BYTES = 24


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def build_webhook_url(base_url: str, telegram_id: int, token: str) -> str:
    return f"{base_url.rstrip('/')}/notify/{telegram_id}/{token}"


class NotificationHandler(BaseFeatureHandler):

    async def generate_notification_token(self, telegram_id: int) -> str:
        """Store a fresh token, replacing any previous one"""
        token = generate_token()
        if not await self.db.set_notification_token(telegram_id, token):
            raise UserNotConnectedError()

        url = build_webhook_url(self.config.CALLBACK_HTTP_URL, telegram_id, token)
        logger.info(f"🔑 Notification token generated for {telegram_id}")
        return (
            "Notification token generated!\n"
            "\n"
            "Set this URL as the Webhook address in Komari's notification settings "
            "(method POST, body JSON with `title` and `message`):\n"
            f"`{url}`\n"
            "\n"
            "Generating a new token invalidates the old URL."
        )

    async def handle_generate(self, message: Message, telegram_id: int):
        if message.chat.type != ChatType.PRIVATE:
            await reply_plain(message, "This command can only be used in a private chat")
            return

        try:
            text = await self.generate_notification_token(telegram_id)
        except KomariBotError as e:
            logger.error(f"Token generation failed for {telegram_id}: {e}")
            await reply_plain(message, f"Unable to generate notification token: {e}")
            return

        await reply_markdown(message, text)
