"""
Node Status Feature
Per-node cards, node id listing and pagination
"""

from .handler import NodeStatusHandler
from .keyboards import NodeStatusKeyboards

__all__ = ['NodeStatusHandler', 'NodeStatusKeyboards']
