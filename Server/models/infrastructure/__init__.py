"""
OrgAdmin Server - Infrastructure Models Package

This package contains dataclass models for infrastructure components.
"""

from models.infrastructure.current_user import CurrentUser

__all__ = [
    'CurrentUser',
]
