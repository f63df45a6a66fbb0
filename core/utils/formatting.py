"""
Message Formatting Helpers
Byte counts, network speeds and MarkdownV2 escaping
"""

from typing import Union

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB")
BYTE_DIVISOR = 1024.0

# bytes per second in one megabit per second
MBPS_DIVISOR = 125000.0

# Backticks and asterisks stay unescaped, formatters use them as markup
MARKDOWN_V2_SPECIAL = ".-|()#+={}[]_><&!"


def bytes_to_pretty_string(value: Union[int, float]) -> str:
    """Render a byte count with binary units, e.g. 1536 -> '1.50 KB'"""
    size = float(value)
    if size == 0:
        return "0 B"

    unit_index = 0
    while size >= BYTE_DIVISOR and unit_index < len(BYTE_UNITS) - 1:
        size /= BYTE_DIVISOR
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {BYTE_UNITS[0]}"
    return f"{size:.2f} {BYTE_UNITS[unit_index]}"


def bytes_per_second_to_mbps(value: Union[int, float]) -> float:
    return value / MBPS_DIVISOR


def usage_percent(used: Union[int, float], total: Union[int, float]) -> float:
    """Percentage of used over total, 0.0 when total is empty"""
    if total <= 0:
        return 0.0
    return used / total * 100.0


def seconds_to_pretty_duration(seconds: Union[int, float]) -> str:
    """e.g. 93784 -> '1d 2h 3m'"""
    seconds = max(int(seconds), 0)
    days, rest = divmod(seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def escape_message(text: str) -> str:
    """Escape MarkdownV2 control characters while keeping inline code markup"""
    return "".join(f"\\{char}" if char in MARKDOWN_V2_SPECIAL else char for char in text)
