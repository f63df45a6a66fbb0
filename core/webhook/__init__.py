from .server import NotificationWebhookServer

__all__ = ['NotificationWebhookServer']
