"""
Komari monitoring API access
"""

from .models import AllInfo, NodeInfo, NodeStatus, PublicInfo
from .rpc_client import KomariRPCClient, komari_client

__all__ = ['AllInfo', 'NodeInfo', 'NodeStatus', 'PublicInfo', 'KomariRPCClient', 'komari_client']
