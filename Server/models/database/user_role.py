"""
OrgAdmin Server - UserRole Database Model

Junction table for the many-to-many relationship between users and roles.
"""

from sqlalchemy import Column, String, ForeignKey

from models.database.base import Base


class UserRole(Base):
    """
    UserRoles junction table - maps users to roles (many-to-many)
    """
    __tablename__ = "sys_user_role"

    user_id = Column(String(32), ForeignKey("sys_user.id", ondelete="CASCADE"), primary_key=True)
    role_id = Column(String(32), ForeignKey("sys_role.id", ondelete="CASCADE"), primary_key=True)
