"""
Node Status Keyboards
Prev / position / next pagination plus refresh for the node card
"""

from typing import Optional, Tuple

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from core.utils.errors import InvalidCallbackDataError


def make_callback_data(telegram_id: int, index: int) -> str:
    return f"{telegram_id}-{index}"


def parse_callback_data(data: Optional[str]) -> Tuple[int, int]:
    """Split '<telegram_id>-<index>' into integers"""
    if not data:
        raise InvalidCallbackDataError("empty payload")
    owner, sep, index = data.rpartition("-")
    if not sep:
        raise InvalidCallbackDataError(data)
    try:
        return int(owner), int(index)
    except ValueError as e:
        raise InvalidCallbackDataError(data) from e


def neighbour_indexes(now_id: int) -> Tuple[int, int]:
    """Previous and next node ids; ids 0 and 1 both denote the first node"""
    if now_id <= 1:
        return 0, 2
    return now_id - 1, now_id + 1


class NodeStatusKeyboards:
    """Keyboards for the per-node status card"""

    def __init__(self, bot_name: str):
        self.bot_name = bot_name

    def get_pagination_keyboard(self, now_id: int, telegram_id: int, max_server: int) -> InlineKeyboardMarkup:
        prev_id, next_id = neighbour_indexes(now_id)

        first_row = []
        if prev_id > 0:
            first_row.append(
                InlineKeyboardButton(text="<-", callback_data=make_callback_data(telegram_id, prev_id))
            )

        first_row.append(
            InlineKeyboardButton(text=f"{now_id} / {max_server}", url=f"https://t.me/{self.bot_name}")
        )

        if next_id <= max_server:
            first_row.append(
                InlineKeyboardButton(text="->", callback_data=make_callback_data(telegram_id, next_id))
            )

        buttons = [
            first_row,
            [InlineKeyboardButton(text="Refresh", callback_data=make_callback_data(telegram_id, now_id))]
        ]

        return InlineKeyboardMarkup(inline_keyboard=buttons)
