"""
OrgAdmin Server - Authentication Utilities

This module provides authentication functionality including:
- JWT token generation and validation
- Authentication dependency for protected routes
- Permission checking dependencies

Security Requirements:
- Never store passwords as plain text (bcrypt via DatabaseManager)
- Implement JWT token-based authentication
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from models.database import User, Role, UserRole
from models.auth import TokenData
from models.infrastructure import CurrentUser
from managers.database_manager import DatabaseManager
from services.user_service import UserService

logger = logging.getLogger(__name__)

# Security scheme for FastAPI
security = HTTPBearer()


# ==================== JWT Token Functions ====================

def CreateAccessToken(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token

    Args:
        data: Dictionary containing user data (user_id, login_id)
        expires_delta: Optional custom expiration time

    Returns:
        str: Encoded JWT token
    """
    from database import config_manager

    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=int(config_manager.get("jwt_expiration_hours")))

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config_manager.get("jwt_secret_key"), algorithm=config_manager.get("jwt_algorithm"))


def DecodeAccessToken(token: str) -> TokenData:
    """
    Decode and validate a JWT access token

    Args:
        token: JWT token string

    Returns:
        TokenData: Token data if valid

    Raises:
        HTTPException: If token is invalid or expired
    """
    from database import config_manager

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            config_manager.get("jwt_secret_key"),
            algorithms=[config_manager.get("jwt_algorithm")]
        )
        user_id: str = payload.get("user_id")
        login_id: str = payload.get("login_id")

        if user_id is None or login_id is None:
            raise credentials_exception

        return TokenData(user_id=user_id, login_id=login_id)

    except JWTError:
        raise credentials_exception


# ==================== Principal Loading ====================

def LoadCurrentUser(db_manager: DatabaseManager, user_id: str) -> Optional[CurrentUser]:
    """
    Load a principal with its authorities and data scopes

    Args:
        db_manager: DatabaseManager instance
        user_id: User ID

    Returns:
        CurrentUser, or None if the user does not exist
    """
    session = db_manager.GetSession()
    try:
        user = session.query(User).filter(User.id == user_id).first()
        if user is None:
            return None

        data_scopes = [
            scope for (scope,) in session.query(Role.data_scope)
            .join(UserRole, UserRole.role_id == Role.id)
            .filter(UserRole.user_id == user_id)
            .distinct()
        ]
        authorities = UserService.FindAuthorities(session, [user_id]).get(user_id, [])

        return CurrentUser(
            user_id=user.id,
            login_id=user.login_id,
            org_id=user.org_id,
            activated=bool(user.activated),
            authorities=authorities,
            data_scopes=sorted(data_scopes)
        )
    finally:
        session.close()


# ==================== Authentication Dependencies ====================

def GetCurrentUser(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> CurrentUser:
    """
    FastAPI dependency to get the current authenticated user
    Validates the JWT token, then resolves the principal through the user cache

    Args:
        credentials: HTTP Bearer token from Authorization header

    Returns:
        CurrentUser: The authenticated principal

    Raises:
        HTTPException: If authentication fails
    """
    from database import db_manager, cache_manager

    token_data = DecodeAccessToken(credentials.credentials)

    current_user = cache_manager.GetCurrentUser(token_data.user_id)
    if current_user is None:
        current_user = LoadCurrentUser(db_manager, token_data.user_id)
        if current_user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found",
                headers={"WWW-Authenticate": "Bearer"},
            )
        cache_manager.PutCurrentUser(current_user)

    if not current_user.activated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is locked",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return current_user


# ==================== Authentication Helper Functions ====================

def AuthenticateUser(db_manager: DatabaseManager, login_id: str, password: str) -> Optional[CurrentUser]:
    """
    Authenticate a user with login ID and password

    Args:
        db_manager: DatabaseManager instance
        login_id: Login ID
        password: Plain text password

    Returns:
        CurrentUser if authentication successful, None otherwise
    """
    session = db_manager.GetSession()
    try:
        user = session.query(User).filter(User.login_id == login_id).first()
        if not user:
            return None
        if not db_manager.VerifyPassword(password, user.password_hash):
            return None
        if not user.activated:
            logger.warning(f"Login refused for locked account '{login_id}'")
            return None
        user_id = user.id
    finally:
        session.close()

    return LoadCurrentUser(db_manager, user_id)


# ==================== Permission Checking ====================

def RequirePermission(permission_name: str):
    """
    Dependency factory to create a permission checking dependency

    Args:
        permission_name: Name of the permission required

    Returns:
        Dependency function that checks for the permission

    Usage:
        @router.get("/something")
        def some_endpoint(user: CurrentUser = Depends(RequirePermission("sys_user_view"))):
            ...
    """
    def permission_checker(current_user: CurrentUser = Depends(GetCurrentUser)) -> CurrentUser:
        """
        Check if current user has the required permission

        Raises:
            HTTPException: 403 Forbidden if user lacks permission
        """
        if not current_user.HasAuthority(permission_name):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied. Required permission: {permission_name}"
            )

        return current_user

    return permission_checker


# Convenience dependencies for common permissions
RequireUserView = RequirePermission("sys_user_view")
RequireUserEdit = RequirePermission("sys_user_edit")
