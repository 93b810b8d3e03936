"""
OrgAdmin Server - Organization Database Model

Organization tree used for data scope filtering.
parent_ids holds the comma-terminated ancestor path, e.g. "root,eng,".
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from models.database.base import Base


class Org(Base):
    """
    Organizations table - hierarchical org units
    """
    __tablename__ = "sys_org"

    id = Column(String(32), primary_key=True)
    name = Column(String, nullable=False)
    parent_id = Column(String(32), nullable=True)
    parent_ids = Column(String, nullable=False, default="")

    users = relationship("User", back_populates="org")
