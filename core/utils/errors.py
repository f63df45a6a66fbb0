"""
Bot Error Types
Every error carries the human-readable text shown back to the chat
"""


class KomariBotError(Exception):
    """Base class for errors surfaced to the requesting chat"""

    prefix = "Error"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(detail)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.prefix}: {self.detail}"
        return self.prefix


class UserNotConnectedError(KomariBotError):
    """No monitor is registered for this Telegram identity"""

    prefix = "Not connected to Komari, use /connect KOMARI_HTTP_URL first"

    def __str__(self) -> str:
        return self.prefix


class DatabaseError(KomariBotError):
    prefix = "Database error"


class RequestError(KomariBotError):
    prefix = "Request error"


class JsonParseError(KomariBotError):
    prefix = "JSON parse error"


class NodeNotFoundError(KomariBotError):
    prefix = "Node not found"


class InvalidCallbackDataError(KomariBotError):
    prefix = "Invalid callback data"
