"""
OrgAdmin Server - Data Scope Filter

Builds the row-level access predicate applied to user list queries
and to the targets of user writes.
The widest data scope among the caller's roles wins, and a caller can
always see their own account.
"""

from sqlalchemy import or_, select, true

from models.database import (
    User, Org, DATA_SCOPES, DATA_SCOPE_ALL, DATA_SCOPE_ORG_AND_CHILD, DATA_SCOPE_ORG, DATA_SCOPE_SELF
)
from models.infrastructure import CurrentUser


def GetEffectiveDataScope(current_user: CurrentUser) -> str:
    """
    Pick the widest data scope held by the caller

    Args:
        current_user: Authenticated principal

    Returns:
        str: One of DATA_SCOPES; DATA_SCOPE_SELF when the caller has no roles
    """
    if "admin" in current_user.authorities:
        return DATA_SCOPE_ALL

    known = [scope for scope in current_user.data_scopes if scope in DATA_SCOPES]
    if not known:
        return DATA_SCOPE_SELF
    return min(known, key=DATA_SCOPES.index)


def BuildDataScopeFilter(current_user: CurrentUser):
    """
    Build a SQLAlchemy clause over User restricting visible rows

    Args:
        current_user: Authenticated principal

    Returns:
        SQLAlchemy boolean clause
    """
    scope = GetEffectiveDataScope(current_user)
    own_row = User.id == current_user.user_id

    if scope == DATA_SCOPE_ALL:
        return true()

    # Org-based scopes need an org; without one the caller sees only themself
    if scope == DATA_SCOPE_SELF or not current_user.org_id:
        return own_row

    if scope == DATA_SCOPE_ORG:
        return or_(User.org_id == current_user.org_id, own_row)

    # DATA_SCOPE_ORG_AND_CHILD: descendants carry the org ID in their ancestor path
    path_entry = f"{current_user.org_id},"
    child_orgs = select(Org.id).where(or_(
        Org.parent_ids.startswith(path_entry, autoescape=True),
        Org.parent_ids.contains("," + path_entry, autoescape=True)
    ))
    return or_(User.org_id == current_user.org_id, User.org_id.in_(child_orgs), own_row)
