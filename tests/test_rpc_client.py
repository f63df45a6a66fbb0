import json

import httpx
import pytest

from core.komari.rpc_client import (
    JSON_RPC_METHODS,
    KomariRPCClient,
    build_batch_request,
    parse_batch_response,
)
from core.utils.errors import JsonParseError, RequestError
from core.utils.http_client import OptimizedHTTPClient, USER_AGENT

RESULTS = {
    1: [{"name": "rpc.help", "summary": "List methods"}],
    2: ["rpc.help", "rpc.methods", "common:getNodes"],
    3: "pong",
    4: "2.0",
    5: {"sitename": "Demo", "description": "Demo site", "private_site": False, "extra": "ignored"},
    6: {"u1": {"uuid": "u1", "name": "alpha", "cpu_cores": 4, "mem_total": 1024, "region": "🇯🇵"}},
    7: {"u1": {"cpu": 12.5, "ram": 512, "ram_total": 1024, "online": True, "uptime": 3600}},
    8: {"2fa_enabled": True, "logged_in": False, "username": "guest"},
    9: {"version": "1.0.0", "hash": "abc123"},
}


def batch_body(results=None, reverse=False):
    results = RESULTS if results is None else results
    body = [{"jsonrpc": "2.0", "id": i, "result": result} for i, result in results.items()]
    return list(reversed(body)) if reverse else body


def make_client(handler) -> KomariRPCClient:
    return KomariRPCClient(OptimizedHTTPClient(transport=httpx.MockTransport(handler)))


def test_batch_request_ids_follow_method_order():
    batch = build_batch_request()
    assert [entry["id"] for entry in batch] == list(range(1, 10))
    assert [entry["method"] for entry in batch] == [m for m, _, _ in JSON_RPC_METHODS]
    assert batch[4]["method"] == "common:getPublicInfo"
    assert all(entry["jsonrpc"] == "2.0" for entry in batch)


class TestParseBatchResponse:

    def test_demultiplexes_regardless_of_order(self):
        in_order = parse_batch_response(batch_body())
        reversed_order = parse_batch_response(batch_body(reverse=True))
        assert in_order == reversed_order
        assert in_order.rpc_ping == "pong"
        assert in_order.public_info.sitename == "Demo"
        assert in_order.nodes["u1"].cpu_cores == 4
        assert in_order.nodes_latest_status["u1"].online is True
        assert in_order.me.two_fa_enabled is True
        assert in_order.version.hash == "abc123"

    def test_missing_id_is_an_error(self):
        results = dict(RESULTS)
        del results[7]
        with pytest.raises(JsonParseError, match="id 7"):
            parse_batch_response(batch_body(results))

    def test_error_entry_is_an_error(self):
        body = batch_body()
        body[2] = {"jsonrpc": "2.0", "id": 3, "error": {"code": -32601, "message": "Method not found"}}
        with pytest.raises(JsonParseError, match="Method not found"):
            parse_batch_response(body)

    def test_result_of_wrong_shape_is_an_error(self):
        results = dict(RESULTS)
        results[6] = ["not", "a", "mapping"]
        with pytest.raises(JsonParseError, match="id 6"):
            parse_batch_response(batch_body(results))

    def test_string_boolean_is_an_error(self):
        results = dict(RESULTS)
        results[7] = {"u1": {"online": "false"}}
        with pytest.raises(JsonParseError, match="id 7"):
            parse_batch_response(batch_body(results))

    def test_non_list_body_is_an_error(self):
        with pytest.raises(JsonParseError):
            parse_batch_response({"jsonrpc": "2.0", "id": 1, "result": "pong"})


class TestKomariRPCClient:

    async def test_posts_batch_to_rpc2(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["agent"] = request.headers["user-agent"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=batch_body(reverse=True))

        client = make_client(handler)
        try:
            all_info = await client.get_all_info("https://komari.example.com/")
        finally:
            await client.http.close()

        assert seen["url"] == "https://komari.example.com/api/rpc2"
        assert seen["agent"] == USER_AGENT
        assert len(seen["body"]) == 9
        assert all_info.public_info.sitename == "Demo"

    async def test_transport_failure_is_request_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        try:
            with pytest.raises(RequestError):
                await client.get_all_info("https://down.example.com")
        finally:
            await client.http.close()

    async def test_http_error_status_is_request_error(self):
        client = make_client(lambda request: httpx.Response(502, text="bad gateway"))
        try:
            with pytest.raises(RequestError):
                await client.get_all_info("https://komari.example.com")
        finally:
            await client.http.close()

    async def test_non_json_body_is_parse_error(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>login</html>"))
        try:
            with pytest.raises(JsonParseError):
                await client.get_all_info("https://komari.example.com")
        finally:
            await client.http.close()
