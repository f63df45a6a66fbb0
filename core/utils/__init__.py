"""
Shared Utility Modules
HTTP client, error types and message formatting
"""

from .http_client import http_client, OptimizedHTTPClient
from .errors import (
    KomariBotError,
    UserNotConnectedError,
    DatabaseError,
    RequestError,
    JsonParseError,
    NodeNotFoundError,
    InvalidCallbackDataError,
)
from .formatting import (
    bytes_to_pretty_string,
    bytes_per_second_to_mbps,
    usage_percent,
    seconds_to_pretty_duration,
    escape_message,
)

__all__ = [
    'http_client',
    'OptimizedHTTPClient',
    'KomariBotError',
    'UserNotConnectedError',
    'DatabaseError',
    'RequestError',
    'JsonParseError',
    'NodeNotFoundError',
    'InvalidCallbackDataError',
    'bytes_to_pretty_string',
    'bytes_per_second_to_mbps',
    'usage_percent',
    'seconds_to_pretty_duration',
    'escape_message',
]
