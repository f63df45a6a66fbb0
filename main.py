#!/usr/bin/env python3
"""
Komari Telegram Bot - Main Entry Point
Serves Komari monitoring data in Telegram and forwards Komari notifications
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from core.config.config import Config
from core.database.unified_database import DatabaseManager
from core.utils.http_client import http_client
from telegram_bot import TelegramBot

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Bootstrap logging until the configured level and file are known
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    handlers=[logging.StreamHandler(sys.stdout)]
)

logger = logging.getLogger(__name__)


def setup_logging(config: Config):
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format=LOG_FORMAT,
        force=True,
        handlers=[
            logging.FileHandler(config.LOG_FILE),
            logging.StreamHandler(sys.stdout)
        ]
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def main():
    """Main application entry point"""
    db_manager = None
    bot = None
    try:
        logger.info("🚀 Starting Komari Telegram Bot...")
        config = Config()
        setup_logging(config)
        logger.info(f"✅ Configuration loaded: {config}")

        http_client.timeout = config.RPC_TIMEOUT

        db_manager = DatabaseManager(config)
        await db_manager.initialize()
        logger.info("✅ Database initialized successfully")

        bot = TelegramBot(config, db_manager)
        await bot.initialize()
        logger.info("✅ Bot initialized successfully")

        logger.info("🎯 Bot is running and ready to serve!")
        await bot.start()

    except Exception as e:
        logger.error(f"💥 Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        try:
            if bot is not None:
                await bot.shutdown()
            if db_manager is not None:
                await db_manager.close()
            await http_client.close()
        except Exception as e:
            logger.error(f"Error during cleanup: {e}")


if __name__ == "__main__":
    # Set event loop policy for Windows compatibility
    if sys.platform.startswith('win'):
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("⏹️ Bot stopped by user")
