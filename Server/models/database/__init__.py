"""
OrgAdmin Server - Database Models Package

This package contains all SQLAlchemy database model definitions.
All models share a common declarative base for proper table relationships.
"""

# Import Base first
from models.database.base import Base

# Import all models
from models.database.org import Org
from models.database.role import (
    Role, DATA_SCOPES, DATA_SCOPE_ALL, DATA_SCOPE_ORG_AND_CHILD, DATA_SCOPE_ORG, DATA_SCOPE_SELF
)
from models.database.permission import Permission
from models.database.role_permission import RolePermission
from models.database.user import User, NewId
from models.database.user_role import UserRole

# Export all models and Base
__all__ = [
    'Base',
    'Org',
    'Role',
    'DATA_SCOPES',
    'DATA_SCOPE_ALL',
    'DATA_SCOPE_ORG_AND_CHILD',
    'DATA_SCOPE_ORG',
    'DATA_SCOPE_SELF',
    'Permission',
    'RolePermission',
    'User',
    'NewId',
    'UserRole',
]
