"""
Fleet Overview Feature
Aggregated metrics across every saved Komari connection
"""

from .aggregator import FleetAggregator, filter_valid_all_info, format_fleet_overview
from .handler import FleetOverviewHandler

__all__ = ['FleetAggregator', 'FleetOverviewHandler', 'filter_valid_all_info', 'format_fleet_overview']
