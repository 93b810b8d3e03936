"""
OrgAdmin Server - Auth Models Package

This package contains Pydantic models for authentication endpoints.
"""

from models.auth.login_request import LoginRequest
from models.auth.login_response import LoginResponse
from models.auth.token_data import TokenData

__all__ = [
    'LoginRequest',
    'LoginResponse',
    'TokenData',
]
