"""
Configuration Management
Loads bot, database and webhook settings from the environment
"""

import os
import logging
from typing import List, Optional, Tuple
from pathlib import Path
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class Config:
    """Configuration manager backed by environment variables"""

    def __init__(self, env_file: Optional[str] = None):
        """Load environment files and validate required values"""
        self._load_environment_files(env_file)
        self._validate_configuration()

    def _load_environment_files(self, env_file: Optional[str]):
        """Load environment file if present"""
        path = Path(env_file or os.getenv('ENV_FILE', '.env'))
        if path.exists():
            load_dotenv(path)
            logger.info(f"✅ Loaded {path} configuration")
        else:
            logger.info(f"ℹ️ {path} not found, using process environment only")

    def _validate_configuration(self):
        """Validate all required configuration values"""
        if not os.getenv('BOT_TOKEN'):
            logger.error("❌ Missing required configuration: BOT_TOKEN (Telegram bot token)")
            raise ValueError("Required configuration missing: BOT_TOKEN (Telegram bot token)")

        if not os.getenv('DATABASE_URL'):
            required_db_vars = ['DB_HOST', 'DB_NAME', 'DB_USER']
            missing_vars = [var for var in required_db_vars if not os.getenv(var)]
            if missing_vars:
                logger.error(f"❌ Missing database configuration: {missing_vars}")
                raise ValueError(f"Database configuration incomplete: {missing_vars}")

        logger.info("✅ Configuration validation completed")

    # Bot Configuration
    @property
    def BOT_TOKEN(self) -> str:
        """Telegram bot token"""
        return os.getenv('BOT_TOKEN', '')

    @property
    def BOT_NAME(self) -> str:
        """Bot username, without the leading @"""
        return os.getenv('BOT_NAME', 'komaritgbot').lstrip('@')

    @property
    def ADMIN_IDS(self) -> List[int]:
        """List of admin user IDs"""
        admin_ids_str = os.getenv('ADMIN_IDS', '')
        if not admin_ids_str:
            return []
        try:
            return [int(uid.strip()) for uid in admin_ids_str.split(',') if uid.strip()]
        except ValueError:
            logger.error("Invalid ADMIN_IDS format")
            return []

    # Database Configuration
    @property
    def DB_HOST(self) -> str:
        """PostgreSQL host"""
        return os.getenv('DB_HOST', '')

    @property
    def DB_PORT(self) -> int:
        """PostgreSQL port"""
        return int(os.getenv('DB_PORT', '5432'))

    @property
    def DB_NAME(self) -> str:
        """PostgreSQL database name"""
        return os.getenv('DB_NAME', '')

    @property
    def DB_USER(self) -> str:
        """PostgreSQL username"""
        return os.getenv('DB_USER', '')

    @property
    def DB_PASSWORD(self) -> str:
        """PostgreSQL password"""
        return os.getenv('DB_PASSWORD', '')

    @property
    def DATABASE_URL(self) -> str:
        """Complete database URL"""
        url = os.getenv('DATABASE_URL')
        if url:
            return url
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def DB_POOL_SIZE(self) -> int:
        """Database connection pool size"""
        return int(os.getenv('DB_POOL_SIZE', '1'))

    @property
    def DB_MAX_POOL_SIZE(self) -> int:
        """Maximum database connection pool size"""
        return int(os.getenv('DB_MAX_POOL_SIZE', '10'))

    @property
    def DB_TIMEOUT(self) -> int:
        """Database command timeout"""
        return int(os.getenv('DB_TIMEOUT', '30'))

    # Monitoring Settings
    @property
    def HEALTH_CHECK_INTERVAL(self) -> int:
        """Database health check interval in seconds"""
        return int(os.getenv('HEALTH_CHECK_INTERVAL', '300'))

    # Komari RPC
    @property
    def RPC_TIMEOUT(self) -> float:
        """Timeout for a single Komari JSON-RPC batch"""
        return float(os.getenv('RPC_TIMEOUT', '5'))

    # Notification Webhook
    @property
    def CALLBACK_HTTP_LISTEN(self) -> str:
        """host:port the notification webhook binds to"""
        return os.getenv('CALLBACK_HTTP_LISTEN', '0.0.0.0:8080')

    @property
    def CALLBACK_HTTP_URL(self) -> str:
        """Public base URL of the notification webhook"""
        return os.getenv('CALLBACK_HTTP_URL', 'http://127.0.0.1:8080').rstrip('/')

    # Logging
    @property
    def LOG_LEVEL(self) -> str:
        return os.getenv('LOG_LEVEL', 'INFO').upper()

    @property
    def LOG_FILE(self) -> str:
        return os.getenv('LOG_FILE', 'bot.log')

    def get_listen_address(self) -> Tuple[str, int]:
        """Split CALLBACK_HTTP_LISTEN into host and port"""
        host, _, port = self.CALLBACK_HTTP_LISTEN.rpartition(':')
        return host or '0.0.0.0', int(port)

    def get_database_config(self) -> dict:
        """Get database pool configuration dictionary"""
        return {
            'dsn': self.DATABASE_URL,
            'min_size': self.DB_POOL_SIZE,
            'max_size': self.DB_MAX_POOL_SIZE,
            'command_timeout': self.DB_TIMEOUT
        }

    def is_admin(self, user_id: int) -> bool:
        return user_id in self.ADMIN_IDS

    def __str__(self) -> str:
        """String representation of configuration (safe for logging)"""
        return f"Config(bot={self.BOT_NAME}, db_host={self.DB_HOST or 'DATABASE_URL'}, admins={len(self.ADMIN_IDS)})"
