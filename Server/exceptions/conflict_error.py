"""
OrgAdmin Server - Conflict Error Exception

Exception raised when a write would duplicate a unique value
(login id or email).
"""

from .service_error import OrgAdminServiceError


class OrgAdminConflictError(OrgAdminServiceError):
    """Exception for uniqueness conflicts."""
    status_code = 400
