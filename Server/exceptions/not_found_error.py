"""
OrgAdmin Server - Not Found Error Exception

Exception raised when a record addressed directly by id does not exist.
"""

from .service_error import OrgAdminServiceError


class OrgAdminNotFoundError(OrgAdminServiceError):
    """Exception for unknown records."""
    status_code = 404
