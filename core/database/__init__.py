"""
Database management module
"""

from .unified_database import DatabaseManager, Monitor
from .coordinator import DatabaseCoordinator

__all__ = ['DatabaseManager', 'DatabaseCoordinator', 'Monitor']
