"""
Notification Webhook Server
Receives Komari push notifications and forwards them to the owning chat
"""

import hmac
import json
import logging
from typing import Optional, Tuple

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiohttp import web

from core.config.config import Config
from core.database.unified_database import DatabaseManager
from core.utils.errors import DatabaseError

logger = logging.getLogger(__name__)

MAX_BODY_SIZE = 64 * 1024


def extract_notification(raw: str, content_type: str) -> Tuple[str, str]:
    """Pull (title, message) out of a JSON object body, or treat the body as text"""
    text = raw.strip()
    if not text:
        return "", ""

    if "json" in content_type or text.startswith("{"):
        try:
            data = json.loads(text)
        except ValueError:
            data = None
        if isinstance(data, dict):
            title = str(data.get("title") or "").strip()
            message = str(data.get("message") or data.get("content") or "").strip()
            return title, message

    return "", text


def format_notification(title: str, message: str) -> str:
    body = "\n".join(part for part in (title, message) if part)
    return f"📢 Komari notification\n\n{body}"


class NotificationWebhookServer:
    """aiohttp application for /notify/{telegram_id}/{token}"""

    def __init__(self, bot: Bot, db_manager: DatabaseManager, config: Config):
        self.bot = bot
        self.db = db_manager
        self.config = config
        self.runner: Optional[web.AppRunner] = None

    def build_app(self) -> web.Application:
        app = web.Application(client_max_size=MAX_BODY_SIZE)
        app.add_routes([
            web.get("/health", self.health),
            web.post("/notify/{telegram_id}/{token}", self.notify),
        ])
        return app

    async def health(self, request: web.Request) -> web.Response:
        return web.json_response({"ok": True})

    async def notify(self, request: web.Request) -> web.Response:
        try:
            telegram_id = int(request.match_info["telegram_id"])
        except ValueError:
            return web.json_response({"ok": False, "error": "bad telegram id"}, status=400)
        token = request.match_info["token"]

        try:
            monitor = await self.db.get_monitor(telegram_id)
        except DatabaseError as e:
            logger.error(f"Webhook lookup failed for {telegram_id}: {e}")
            return web.json_response({"ok": False, "error": "database error"}, status=500)

        if (monitor is None or not monitor.notification_token
                or not hmac.compare_digest(monitor.notification_token.encode(), token.encode())):
            logger.warning(f"🚫 Webhook rejected for {telegram_id} from {request.remote}")
            return web.json_response({"ok": False, "error": "invalid token"}, status=403)

        raw = (await request.read()).decode("utf-8", errors="replace")
        title, message = extract_notification(raw, request.content_type or "")
        if not title and not message:
            return web.json_response({"ok": False, "error": "empty notification"}, status=400)

        try:
            await self.bot.send_message(telegram_id, format_notification(title, message), parse_mode=None)
        except TelegramAPIError as e:
            logger.error(f"Forwarding notification to {telegram_id} failed: {e}")
            return web.json_response({"ok": False, "error": "telegram error"}, status=502)

        logger.info(f"📢 Notification forwarded to {telegram_id}")
        return web.json_response({"ok": True})

    async def start(self):
        host, port = self.config.get_listen_address()
        self.runner = web.AppRunner(self.build_app(), access_log=None)
        await self.runner.setup()
        site = web.TCPSite(self.runner, host, port)
        await site.start()
        logger.info(f"🌐 Notification webhook listening on {host}:{port}")

    async def shutdown(self):
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            logger.info("✅ Notification webhook stopped")
