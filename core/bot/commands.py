"""
Chat Command Parser
Maps message text to the bot's command set
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CommandType(Enum):
    START = "start"
    HELP = "help"
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    UPDATE = "update"
    GET_NODE_ID = "get_node_id"
    TOTAL_STATUS = "total_status"
    STATUS = "status"
    STATUS_ID = "status_id"
    GENERATE_NOTIFICATION_TOKEN = "generate_notification_token"
    ALL_STATUS = "all_status"


class CommandParseError(ValueError):
    """A known command with unusable arguments"""


@dataclass(frozen=True)
class Command:
    type: CommandType
    http_url: Optional[str] = None
    node_name: Optional[str] = None
    node_id: Optional[int] = None


_NO_ARG_COMMANDS = {
    "start": CommandType.START,
    "help": CommandType.HELP,
    "disconnect": CommandType.DISCONNECT,
    "update": CommandType.UPDATE,
    "get_node_id": CommandType.GET_NODE_ID,
    "total_status": CommandType.TOTAL_STATUS,
    "generate_notification_token": CommandType.GENERATE_NOTIFICATION_TOKEN,
    "all_status": CommandType.ALL_STATUS,
}


def _split_command(text: str, bot_name: str) -> Optional[tuple]:
    """Return (name, args) for '/name[@bot] args', or None if addressed to another bot"""
    words = text.split()
    if not words:
        return None
    head, args = words[0][1:], words[1:]
    name, _, mention = head.partition("@")
    if mention and mention.lower() != bot_name.lower():
        return None
    return name, args


def parse_command(text: Optional[str], bot_name: str) -> Optional[Command]:
    """Parse chat text; None means the text is not a command for this bot"""
    if not text or not text.startswith("/"):
        return None

    split = _split_command(text, bot_name)
    if split is None:
        return None
    name, args = split

    if name in _NO_ARG_COMMANDS:
        return Command(_NO_ARG_COMMANDS[name])

    if name == "connect":
        if not args:
            raise CommandParseError("Missing HTTP URL, usage: /connect HTTP_URL")
        return Command(CommandType.CONNECT, http_url=args[0].rstrip("/"))

    if name == "status":
        if not args:
            return Command(CommandType.STATUS_ID, node_id=1)
        return Command(CommandType.STATUS, node_name=" ".join(args))

    if name == "status_id":
        try:
            node_id = int(args[0]) if args else 1
        except ValueError:
            node_id = 1
        return Command(CommandType.STATUS_ID, node_id=node_id)

    return None
