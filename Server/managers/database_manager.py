"""
OrgAdmin Server - Database Manager

This module manages database connection, initialization, and the
bcrypt password-hashing provider used by the user service.
"""

import logging
import secrets
import string
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
import bcrypt

from models.database import (
    Base, Org, Role, Permission, RolePermission, User, UserRole, NewId,
    DATA_SCOPE_ALL, DATA_SCOPE_ORG_AND_CHILD, DATA_SCOPE_SELF
)

logger = logging.getLogger(__name__)


ROOT_ORG_ID = "root"
ADMIN_ROLE_ID = "admin"


class DatabaseManager:
    """
    Manages database connection, initialization, and operations
    """

    def __init__(self, database_url: str = "sqlite:///database/orgadmin.db"):
        """
        Initialize database manager

        Args:
            database_url: SQLAlchemy database URL
        """
        self.database_url = database_url

        # Ensure database directory exists for file-backed SQLite
        url = make_url(database_url)
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            db_dir = Path(url.database).parent
            if db_dir and str(db_dir) != '.':
                db_dir.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(database_url, echo=False)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)

    def InitializeDatabase(self) -> Optional[str]:
        """
        Initialize the database with all tables and default data
        Creates tables if they don't exist, populates default roles,
        permissions and the root organization, and creates a default
        admin user on first run.

        Returns:
            str: Generated admin password if admin user was created, None otherwise
        """
        # Create all tables
        Base.metadata.create_all(bind=self.engine)

        session = self.SessionLocal()
        admin_password = None

        try:
            # Check if this is first run (no users exist)
            is_first_run = session.query(User).count() == 0

            self.PopulateDefaultOrgs(session)
            self.PopulateDefaultRolesAndPermissions(session)

            if is_first_run:
                admin_password = self.GenerateRandomPassword()
                admin_user = User(
                    id=NewId(),
                    login_id="admin",
                    password_hash=self.HashPassword(admin_password),
                    name="Administrator",
                    org_id=ROOT_ORG_ID,
                    created_at=datetime.now(timezone.utc),
                    activated=True
                )
                session.add(admin_user)
                session.flush()
                session.add(UserRole(user_id=admin_user.id, role_id=ADMIN_ROLE_ID))
                logger.info("Created default admin user 'admin'")

            session.commit()

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        return admin_password

    def PopulateDefaultOrgs(self, session):
        """
        Create the root organization if it is missing

        Args:
            session: SQLAlchemy session
        """
        if not session.query(Org).filter(Org.id == ROOT_ORG_ID).first():
            session.add(Org(id=ROOT_ORG_ID, name="Headquarters", parent_id=None, parent_ids=""))
            session.flush()
            logger.info("Added default organization: Headquarters")

    def PopulateDefaultRolesAndPermissions(self, session):
        """
        Populate default roles and permissions for RBAC
        Only adds roles and permissions that don't already exist

        Args:
            session: SQLAlchemy session
        """
        default_permissions = {
            "admin": "Full administrative access to all server functions",
            "sys_user_view": "Can list and view user accounts",
            "sys_user_edit": "Can create, update, delete, lock and unlock user accounts"
        }

        # Create permissions if they don't exist
        permission_objs = {}
        for perm_name, description in default_permissions.items():
            existing = session.query(Permission).filter(Permission.permission_name == perm_name).first()
            if not existing:
                perm = Permission(permission_name=perm_name, description=description)
                session.add(perm)
                session.flush()  # Flush to get the permission_id
                permission_objs[perm_name] = perm
                logger.info(f"Added default permission: {perm_name}")
            else:
                permission_objs[perm_name] = existing

        # Define default roles with their permissions
        default_roles = {
            ADMIN_ROLE_ID: {
                "name": "Administrator",
                "description": "Full administrative access",
                "data_scope": DATA_SCOPE_ALL,
                "permissions": ["admin", "sys_user_view", "sys_user_edit"]
            },
            "org_manager": {
                "name": "Organization Manager",
                "description": "Manages users of their organization and its children",
                "data_scope": DATA_SCOPE_ORG_AND_CHILD,
                "permissions": ["sys_user_view", "sys_user_edit"]
            },
            "staff": {
                "name": "Staff",
                "description": "Can only view their own account",
                "data_scope": DATA_SCOPE_SELF,
                "permissions": ["sys_user_view"]
            }
        }

        for role_id, role_config in default_roles.items():
            existing_role = session.query(Role).filter(Role.id == role_id).first()

            if not existing_role:
                role = Role(
                    id=role_id,
                    name=role_config["name"],
                    description=role_config["description"],
                    data_scope=role_config["data_scope"],
                    is_system_role=True
                )
                session.add(role)
                session.flush()
                logger.info(f"Added default role: {role_config['name']}")

                for perm_name in role_config["permissions"]:
                    session.add(RolePermission(
                        role_id=role.id,
                        permission_id=permission_objs[perm_name].permission_id
                    ))
            else:
                # Role exists - check if permissions need to be added
                existing_perm_names = [p.permission_name for p in existing_role.permissions]
                for perm_name in role_config["permissions"]:
                    if perm_name not in existing_perm_names:
                        session.add(RolePermission(
                            role_id=existing_role.id,
                            permission_id=permission_objs[perm_name].permission_id
                        ))
                        logger.info(f"Added permission '{perm_name}' to role '{role_config['name']}'")

    @staticmethod
    def GenerateRandomPassword(length: int = 12) -> str:
        """
        Generate a secure random password

        Args:
            length: Password length (default 12)

        Returns:
            str: Generated password
        """
        alphabet = string.ascii_letters + string.digits + "!@#$%^&*"
        return ''.join(secrets.choice(alphabet) for _ in range(length))

    @staticmethod
    def HashPassword(password: str) -> str:
        """
        Hash a password using bcrypt
        Truncates to User.PASSWORD_MAX_BYTES to comply with bcrypt's maximum password length

        Args:
            password: Plain text password

        Returns:
            str: Hashed password (as string)
        """
        password_bytes = password.encode('utf-8')[:User.PASSWORD_MAX_BYTES]
        hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt())
        return hashed.decode('utf-8')

    @staticmethod
    def VerifyPassword(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against a hash
        Truncates to User.PASSWORD_MAX_BYTES to match how it was hashed

        Args:
            plain_password: Plain text password to verify
            hashed_password: Stored password hash (as string)

        Returns:
            bool: True if password matches, False otherwise
        """
        password_bytes = plain_password.encode('utf-8')[:User.PASSWORD_MAX_BYTES]
        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))

    def GetSession(self):
        """
        Get a new database session

        Returns:
            Session: SQLAlchemy session
        """
        return self.SessionLocal()
