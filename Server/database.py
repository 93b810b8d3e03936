"""
OrgAdmin Server - Database Module

This module exports the shared manager instances for use across the application.
"""

from managers.config_manager import ConfigManager
from managers.database_manager import DatabaseManager
from managers.cache_manager import UserCacheManager

# Global manager instances
# Initialized in server.py lifespan handler
config_manager: ConfigManager = None
db_manager: DatabaseManager = None
cache_manager: UserCacheManager = None
