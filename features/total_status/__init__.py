from .handler import TotalStatusHandler, format_total_status

__all__ = ['TotalStatusHandler', 'format_total_status']
