"""
Shared HTTP Client with Connection Pooling
One AsyncClient reused by every Komari request
"""

import httpx
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

USER_AGENT = "komari-tgbot-py"


class OptimizedHTTPClient:
    """HTTP client with connection pooling and a fixed request timeout"""

    def __init__(self, timeout: float = 5.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client: Optional[httpx.AsyncClient] = None
        self.timeout = timeout
        self._transport = transport

    async def initialize(self):
        """Initialize pooled HTTP client"""
        limits = httpx.Limits(
            max_keepalive_connections=50,
            max_connections=100,
            keepalive_expiry=300
        )

        self.client = httpx.AsyncClient(
            limits=limits,
            timeout=httpx.Timeout(self.timeout),
            http2=True,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self._transport
        )

        logger.info("✅ HTTP client initialized")

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        if not self.client:
            await self.initialize()
        return await self.client.post(url, **kwargs)

    async def close(self):
        """Close HTTP client and cleanup connections"""
        if self.client:
            await self.client.aclose()
            self.client = None


# Global HTTP client instance
http_client = OptimizedHTTPClient()
