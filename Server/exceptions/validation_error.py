"""
OrgAdmin Server - Validation Error Exception

Exception raised when a request is well-formed but violates a business rule,
e.g. mismatched confirmation password.
"""

from .service_error import OrgAdminServiceError


class OrgAdminValidationError(OrgAdminServiceError):
    """Exception for request validation errors."""
    status_code = 400
