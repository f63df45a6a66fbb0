"""
Komari JSON-RPC Client
Issues the fixed nine-method batch against /api/rpc2 and demultiplexes by id
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from core.utils.errors import JsonParseError, RequestError
from core.utils.http_client import OptimizedHTTPClient, http_client
from .models import (
    AllInfo,
    Me,
    PublicInfo,
    Version,
    parse_help,
    parse_methods,
    parse_nodes,
    parse_nodes_latest_status,
    parse_string,
)

logger = logging.getLogger(__name__)

JSON_RPC_VERSION = "2.0"
RPC_PATH = "/api/rpc2"

# (method, AllInfo attribute, parser); the request id is the 1-based position
JSON_RPC_METHODS: List[Tuple[str, str, Callable[[Any], Any]]] = [
    ("rpc.help", "rpc_help", parse_help),
    ("rpc.methods", "rpc_methods", parse_methods),
    ("rpc.ping", "rpc_ping", parse_string),
    ("rpc.version", "rpc_version", parse_string),
    ("common:getPublicInfo", "public_info", PublicInfo.from_dict),
    ("common:getNodes", "nodes", parse_nodes),
    ("common:getNodesLatestStatus", "nodes_latest_status", parse_nodes_latest_status),
    ("common:getMe", "me", Me.from_dict),
    ("common:getVersion", "version", Version.from_dict),
]


def build_batch_request() -> List[Dict[str, Any]]:
    """Build the JSON-RPC 2.0 batch body"""
    return [
        {"jsonrpc": JSON_RPC_VERSION, "method": method, "id": index}
        for index, (method, _, _) in enumerate(JSON_RPC_METHODS, start=1)
    ]


def parse_batch_response(body: Any) -> AllInfo:
    """Demultiplex a batch response by id into an AllInfo"""
    if not isinstance(body, list):
        raise JsonParseError("batch response is not a list")

    by_id: Dict[int, Dict[str, Any]] = {}
    for entry in body:
        if isinstance(entry, dict) and isinstance(entry.get("id"), int):
            by_id[entry["id"]] = entry

    values = {}
    for index, (method, attribute, parser) in enumerate(JSON_RPC_METHODS, start=1):
        entry = by_id.get(index)
        if entry is None:
            raise JsonParseError(f"no response with id {index} ({method})")
        if "error" in entry and "result" not in entry:
            error = entry["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise JsonParseError(f"response with id {index} ({method}) failed: {message}")
        try:
            values[attribute] = parser(entry.get("result"))
        except (TypeError, ValueError) as e:
            raise JsonParseError(f"response with id {index} ({method}): {e}") from e

    return AllInfo(**values)


class KomariRPCClient:
    """Fetches AllInfo from a Komari site"""

    def __init__(self, client: Optional[OptimizedHTTPClient] = None):
        self.http = client or http_client

    async def get_all_info(self, http_url: str) -> AllInfo:
        url = f"{http_url.rstrip('/')}{RPC_PATH}"
        logger.debug(f"📡 RPC batch -> {url}")

        try:
            response = await self.http.post(url, json=build_batch_request())
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"RPC request to {url} failed: {e}")
            raise RequestError(str(e) or e.__class__.__name__) from e

        try:
            body = response.json()
        except ValueError as e:
            raise JsonParseError(f"invalid JSON body: {e}") from e

        return parse_batch_response(body)


# Global RPC client instance
komari_client = KomariRPCClient()
