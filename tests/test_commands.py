import pytest

from core.bot.commands import Command, CommandParseError, CommandType, parse_command

BOT = "komaritgbot"


@pytest.mark.parametrize("text,expected", [
    ("/start", Command(CommandType.START)),
    ("/help", Command(CommandType.HELP)),
    ("/connect https://komari.example.com/", Command(CommandType.CONNECT, http_url="https://komari.example.com")),
    ("/disconnect", Command(CommandType.DISCONNECT)),
    ("/update", Command(CommandType.UPDATE)),
    ("/get_node_id", Command(CommandType.GET_NODE_ID)),
    ("/total_status", Command(CommandType.TOTAL_STATUS)),
    ("/status", Command(CommandType.STATUS_ID, node_id=1)),
    ("/status web", Command(CommandType.STATUS, node_name="web")),
    ("/status Hong Kong", Command(CommandType.STATUS, node_name="Hong Kong")),
    ("/status_id 3", Command(CommandType.STATUS_ID, node_id=3)),
    ("/status_id", Command(CommandType.STATUS_ID, node_id=1)),
    ("/status_id abc", Command(CommandType.STATUS_ID, node_id=1)),
    ("/generate_notification_token", Command(CommandType.GENERATE_NOTIFICATION_TOKEN)),
    ("/all_status", Command(CommandType.ALL_STATUS)),
    ("/help@komaritgbot", Command(CommandType.HELP)),
    ("/help@KomariTGBot", Command(CommandType.HELP)),
])
def test_parse_known_commands(text, expected):
    assert parse_command(text, BOT) == expected


@pytest.mark.parametrize("text", [
    None,
    "",
    "hello",
    "/",
    "/unknown",
    "/help@otherbot",
])
def test_ignored_text(text):
    assert parse_command(text, BOT) is None


def test_connect_without_url_is_an_error():
    with pytest.raises(CommandParseError, match="Missing HTTP URL"):
        parse_command("/connect", BOT)
