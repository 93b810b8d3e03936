"""
OrgAdmin Server - Service Error Exception

Base exception class for all errors surfaced to API callers.
"""


class OrgAdminServiceError(Exception):
    """Base exception for service errors."""

    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
