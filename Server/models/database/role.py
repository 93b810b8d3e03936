"""
OrgAdmin Server - Role Database Model

Role model for RBAC (Role-Based Access Control).
Each role also carries the data scope its holders may see.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.orm import relationship

from models.database.base import Base


# Data scopes, ordered from widest to narrowest
DATA_SCOPE_ALL = "all"
DATA_SCOPE_ORG_AND_CHILD = "org_and_child"
DATA_SCOPE_ORG = "org"
DATA_SCOPE_SELF = "self"
DATA_SCOPES = [DATA_SCOPE_ALL, DATA_SCOPE_ORG_AND_CHILD, DATA_SCOPE_ORG, DATA_SCOPE_SELF]


class Role(Base):
    """
    Roles table - stores role definitions for RBAC
    """
    __tablename__ = "sys_role"

    id = Column(String(32), primary_key=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)
    data_scope = Column(String(20), nullable=False, default=DATA_SCOPE_SELF)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    is_system_role = Column(Boolean, default=False)  # True for default roles that cannot be deleted

    # Relationship to permissions through junction table
    permissions = relationship("Permission", secondary="role_permissions", back_populates="roles")
