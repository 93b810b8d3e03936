"""
OrgAdmin Server - User Database Model

User account record: credentials, profile fields and activation state.
Role assignments live in the sys_user_role table and are loaded explicitly.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from models.database.base import Base


def NewId() -> str:
    """Generate a new 32-character primary key"""
    return uuid.uuid4().hex


class User(Base):
    """
    Users table - stores account credentials and profile info
    """
    __tablename__ = "sys_user"

    PASSWORD_MIN_LENGTH = 6
    PASSWORD_MAX_LENGTH = 64
    # bcrypt only reads this many bytes of its input
    PASSWORD_MAX_BYTES = 72

    id = Column(String(32), primary_key=True, default=NewId)
    login_id = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    avatar = Column(String, nullable=True)
    org_id = Column(String(32), ForeignKey("sys_org.id"), nullable=True)
    name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    # NULLs do not collide, so only users that supply an email are constrained
    email = Column(String, unique=True, nullable=True)
    activated = Column(Boolean, nullable=False, default=True)
    lang_key = Column(String(10), nullable=True)
    activation_key = Column(String(20), nullable=True)
    reset_key = Column(String(20), nullable=True)
    reset_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    last_modified_at = Column(DateTime, nullable=True)

    # Relationship to organization
    org = relationship("Org", back_populates="users")
