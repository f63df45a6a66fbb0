"""
Connection Feature
Save, refresh and remove the Komari site a user monitors
"""

from .handler import ConnectionHandler, normalize_url, format_site_summary

__all__ = ['ConnectionHandler', 'normalize_url', 'format_site_summary']
