"""
OrgAdmin Server - Services Package

This package contains the service classes that own persistence logic.
"""

from services.user_service import UserService

__all__ = ['UserService']
