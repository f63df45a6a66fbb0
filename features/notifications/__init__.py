"""
Notifications Feature
Per-user webhook tokens for forwarding Komari alerts into Telegram
"""

from .handler import NotificationHandler, build_webhook_url, generate_token

__all__ = ['NotificationHandler', 'build_webhook_url', 'generate_token']
