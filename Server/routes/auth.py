"""
OrgAdmin Server - Authentication Endpoints

This module contains the login endpoint that issues JWT access tokens.
"""

import logging
from fastapi import APIRouter, HTTPException, status

from models.auth import LoginRequest, LoginResponse
from auth import AuthenticateUser, CreateAccessToken


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


# ==================== Authentication Endpoints ====================

@router.post("/auth/login", response_model=LoginResponse, tags=["Authentication"])
def login(login_request: LoginRequest):
    """
    Authenticate user and return JWT token

    Args:
        login_request: Login ID and password

    Returns:
        LoginResponse: JWT token and expiration time

    Raises:
        HTTPException: If credentials are invalid or the account is locked
    """
    from database import db_manager, config_manager

    current_user = AuthenticateUser(db_manager, login_request.login_id, login_request.password)

    if not current_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect login ID or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = CreateAccessToken({
        "user_id": current_user.user_id,
        "login_id": current_user.login_id
    })

    expires_in = int(config_manager.get("jwt_expiration_hours")) * 3600

    logger.info(f"User '{current_user.login_id}' logged in successfully")

    return LoginResponse(
        token=access_token,
        expires_in=expires_in
    )
