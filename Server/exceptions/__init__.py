"""
OrgAdmin Server - Exceptions Package

Contains all exception classes raised by the OrgAdmin services.
"""

from .service_error import OrgAdminServiceError
from .validation_error import OrgAdminValidationError
from .conflict_error import OrgAdminConflictError
from .not_found_error import OrgAdminNotFoundError

__all__ = [
    'OrgAdminServiceError',
    'OrgAdminValidationError',
    'OrgAdminConflictError',
    'OrgAdminNotFoundError'
]
