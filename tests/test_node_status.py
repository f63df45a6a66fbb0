from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import Message

from conftest import FakeRPCClient, make_all_info, make_node, make_status, make_message, reply_text
from core.utils.errors import NodeNotFoundError, RequestError
from features.node_status.handler import (
    NodeStatusHandler,
    build_node_id_list,
    find_node_id_by_name,
    render_node_status,
    resolve_node_index,
)

SITE = "https://komari.example.com"


class TestNodeListing:

    def test_nodes_numbered_in_uuid_order(self, demo_info):
        text, entries = build_node_id_list(demo_info)
        assert text == "`1` - alpha\n`2` - beta\n`3` - gamma"
        assert [uuid for uuid, _ in entries] == ["a-uuid", "b-uuid", "c-uuid"]

    def test_status_without_node_info_is_unknown(self):
        all_info = make_all_info([make_node("a", "alpha")], {"a": make_status(), "z": make_status()})
        text, _ = build_node_id_list(all_info)
        assert text.splitlines()[1] == "`2` - unknown node"


@pytest.mark.parametrize("index,position", [(0, 0), (1, 0), (2, 1), (5, 4)])
def test_resolve_node_index(index, position):
    assert resolve_node_index(index) == position


class TestFindByName:

    def test_first_match_wins(self):
        all_info = make_all_info([make_node("b", "web-2"), make_node("a", "web-1")])
        assert find_node_id_by_name(all_info, "web") == 1
        assert find_node_id_by_name(all_info, "2") == 2

    def test_match_is_case_sensitive(self, demo_info):
        with pytest.raises(NodeNotFoundError):
            find_node_id_by_name(demo_info, "ALPHA")


class TestRenderNodeStatus:

    def test_card_contents(self, demo_info):
        text = render_node_status(demo_info, 2)
        assert text.startswith("Demo | 🇩🇪 | beta\n")
        assert "GPU: `RTX 4090`" in text
        assert "UPTIME: `1d 2h 3m`" in text
        assert "RAM: `2.00 GB` / `8.00 GB` `25.00%`" in text
        assert "UP: `2.00 Mbps`" in text
        assert "DOWN: `1.00 Mbps`" in text
        assert "CONN: `10 TCP` / `2 UDP`" in text

    def test_gpu_line_only_when_present(self, demo_info):
        assert "GPU:" not in render_node_status(demo_info, 1)

    def test_zero_and_one_are_the_first_node(self, demo_info):
        assert render_node_status(demo_info, 0) == render_node_status(demo_info, 1)

    @pytest.mark.parametrize("index", [4, -1, -5])
    def test_out_of_range(self, demo_info, index):
        with pytest.raises(NodeNotFoundError, match="does not exist"):
            render_node_status(demo_info, index)

    def test_status_without_node_info(self):
        all_info = make_all_info([], {"ghost": make_status()})
        with pytest.raises(NodeNotFoundError, match="UUID"):
            render_node_status(all_info, 1)


@pytest.fixture
async def handler(bot, fake_db, config, demo_info):
    await fake_db.replace_monitor(42, SITE)
    return NodeStatusHandler(bot, fake_db, config, FakeRPCClient({SITE: demo_info}))


def make_callback(data, user_id=42):
    callback = MagicMock()
    callback.data = data
    callback.from_user.id = user_id
    callback.answer = AsyncMock()
    callback.message = MagicMock(spec=Message)
    callback.message.edit_text = AsyncMock()
    return callback


class TestNodeStatusHandler:

    async def test_status_with_id_builds_keyboard(self, handler):
        text, keyboard = await handler.status_with_id(42, 3)
        assert "gamma" in text
        assert keyboard.inline_keyboard[0][-1].text == "3 / 3"

    async def test_status_by_name(self, handler):
        text, _ = await handler.status_by_name(42, "bet")
        assert text.startswith("Demo | 🇩🇪 | beta")

    async def test_not_connected_reply(self, handler):
        message = make_message(user_id=7)
        await handler.handle_status_id(message, 7, 1)
        assert reply_text(message).startswith("Unable to read Komari data: Not connected to Komari")
        assert message.reply.call_args.kwargs["parse_mode"] is None

    async def test_status_reply_is_escaped_markdown(self, handler):
        message = make_message()
        await handler.handle_status_id(message, 42, 1)
        kwargs = message.reply.call_args.kwargs
        assert kwargs["parse_mode"] == ParseMode.MARKDOWN_V2
        assert kwargs["reply_markup"] is not None
        assert "`10\\.00%`" in reply_text(message)

    async def test_negative_id_is_not_the_first_node(self, handler):
        message = make_message()
        await handler.handle_status_id(message, 42, -5)
        assert reply_text(message) == "Unable to read Komari data: Node not found: node -5 does not exist"
        assert message.reply.call_args.kwargs["parse_mode"] is None

    async def test_get_node_id(self, handler):
        message = make_message()
        await handler.handle_get_node_id(message, 42)
        assert reply_text(message) == "`1` \\- alpha\n`2` \\- beta\n`3` \\- gamma"


class TestNodeStatusCallback:

    async def test_owner_refresh_edits_message(self, handler):
        callback = make_callback("42-2")
        await handler.handle_callback(callback)
        callback.answer.assert_awaited_once_with()
        args, kwargs = callback.message.edit_text.call_args
        assert "beta" in args[0]
        assert kwargs["parse_mode"] == ParseMode.MARKDOWN_V2

    async def test_other_user_is_ignored(self, handler):
        callback = make_callback("42-2", user_id=99)
        await handler.handle_callback(callback)
        callback.answer.assert_awaited_once_with()
        callback.message.edit_text.assert_not_called()

    async def test_malformed_payload(self, handler):
        callback = make_callback("garbage")
        await handler.handle_callback(callback)
        callback.answer.assert_awaited_once_with("Invalid callback data: garbage")
        callback.message.edit_text.assert_not_called()

    async def test_fetch_error_is_edited_in_as_text(self, handler):
        handler.rpc.sites[SITE] = RequestError("timed out")
        callback = make_callback("42-1")
        await handler.handle_callback(callback)
        args, kwargs = callback.message.edit_text.call_args
        assert args[0] == "Unable to read Komari data: Request error: timed out"
        assert kwargs["parse_mode"] is None

    async def test_unchanged_content_is_ignored(self, handler):
        callback = make_callback("42-1")
        callback.message.edit_text.side_effect = TelegramBadRequest(
            method=MagicMock(), message="Bad Request: message is not modified"
        )
        await handler.handle_callback(callback)
        callback.message.edit_text.assert_awaited_once()

    async def test_inline_message_is_edited_through_bot(self, handler, bot):
        callback = make_callback("42-1")
        callback.message = None
        callback.inline_message_id = "inline-1"
        await handler.handle_callback(callback)
        assert bot.edit_message_text.call_args.kwargs["inline_message_id"] == "inline-1"
