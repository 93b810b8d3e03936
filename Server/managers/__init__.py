"""
OrgAdmin Server - Managers Package

This package contains manager classes for configuration, database
and cache operations.
"""

from managers.config_manager import ConfigManager
from managers.database_manager import DatabaseManager
from managers.cache_manager import UserCacheManager

__all__ = ['ConfigManager', 'DatabaseManager', 'UserCacheManager']
