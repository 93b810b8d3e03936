"""
OrgAdmin Server - API Models Package

This package contains Pydantic models for all API endpoints.
"""

from models.api.user_management import UserForm, UserResult, LOGIN_ID_PATTERN
from models.api.page import PageRequest, PageResult, SORTABLE_COLUMNS

__all__ = [
    'UserForm',
    'UserResult',
    'LOGIN_ID_PATTERN',
    'PageRequest',
    'PageResult',
    'SORTABLE_COLUMNS',
]
