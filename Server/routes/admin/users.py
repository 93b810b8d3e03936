"""
OrgAdmin Server - Admin Users Endpoints

Routes are declared in USER_ROUTES as (method, path, handler) and
registered on the router at import time.
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from models.api import UserForm, PageRequest
from models.infrastructure import CurrentUser
from services.user_service import UserService
from exceptions import OrgAdminServiceError, OrgAdminValidationError, OrgAdminConflictError, OrgAdminNotFoundError
from auth import RequireUserView, RequireUserEdit
from data_scope import BuildDataScopeFilter
from responses import BuildOk, BuildObject, WrapOrNotFound

# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter(prefix="/sys/user", tags=["Users"])


def GetUserService() -> UserService:
    """
    FastAPI dependency building a UserService over the shared managers
    """
    from database import db_manager, cache_manager
    return UserService(db_manager, cache_manager)


def SplitIds(ids: str) -> List[str]:
    """
    Split a delimiter-separated ID list, dropping blanks and duplicates

    Args:
        ids: e.g. "a1,b2,c3"

    Returns:
        list: IDs in first-seen order
    """
    from database import config_manager
    separator = config_manager.get("id_separator") if config_manager else ","
    return list(dict.fromkeys(part.strip() for part in ids.split(separator) if part.strip()))


# ==================== Admin - User Management ====================

def get_user_page(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    sort_name: str = Query("created_at", alias="sortName"),
    sort_order: str = Query("desc", alias="sortOrder", pattern=r"^(asc|desc)$"),
    login_id: Optional[str] = Query(None, alias="loginId"),
    name: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    org_id: Optional[str] = Query(None, alias="orgId"),
    activated: Optional[bool] = Query(None),
    current_user: CurrentUser = Depends(RequireUserView),
    user_service: UserService = Depends(GetUserService)
):
    """
    List users visible to the caller, one page at a time

    Returns:
        Envelope with page, size, total and items
    """
    page_request = PageRequest(
        page=page, size=size, sort_name=sort_name, sort_order=sort_order,
        login_id=login_id, name=name, email=email, org_id=org_id, activated=activated
    )
    result = user_service.FindPage(page_request, BuildDataScopeFilter(current_user))
    return BuildObject(result)


def get_user(
    id: str,
    current_user: CurrentUser = Depends(RequireUserView),
    user_service: UserService = Depends(GetUserService)
):
    """
    Get a single user

    Args:
        id: User ID

    Returns:
        Envelope with the user, or 404 if it does not exist
    """
    logger.debug(f"Request to get user: {id}")
    return WrapOrNotFound(user_service.FindResultById(id), f"User with ID {id} not found")


def save_user(
    user_form: UserForm,
    confirm_password: Optional[str] = Query(None, alias="confirmPassword"),
    current_user: CurrentUser = Depends(RequireUserEdit),
    user_service: UserService = Depends(GetUserService)
):
    """
    Create a user, or update one when the form carries an ID

    Args:
        user_form: User write form
        confirm_password: Must equal the form password when one is supplied

    Returns:
        Acknowledgment with the login ID
    """
    logger.debug(f"Request to save user: {user_form.login_id}")

    try:
        if user_form.password and user_form.password != confirm_password:
            raise OrgAdminValidationError("Password and confirmation password do not match")

        # Callers may only update accounts inside their data scope
        if user_form.id and not user_service.FilterVisibleIds([user_form.id], BuildDataScopeFilter(current_user)):
            raise OrgAdminNotFoundError(f"User with ID {user_form.id} not found")

        if user_service.CheckByProperty("login_id", user_form.login_id, user_form.id):
            raise OrgAdminConflictError(f"Login ID '{user_form.login_id}' already exists")

        if user_form.email and user_service.CheckByProperty("email", user_form.email, user_form.id):
            raise OrgAdminConflictError(f"Email '{user_form.email}' already exists")

        user = user_service.Save(user_form)
        user_service.InvalidateCaches()

        action = "updated" if user_form.id else "created"
        logger.info(f"Admin '{current_user.login_id}' {action} user '{user.login_id}'")

        return BuildOk(f"Saved user '{user.login_id}'", {"id": user.id, "loginId": user.login_id})

    except OrgAdminServiceError:
        raise
    except Exception as e:
        logger.error(f"Error saving user: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to save user")


def delete_users(
    ids: str,
    current_user: CurrentUser = Depends(RequireUserEdit),
    user_service: UserService = Depends(GetUserService)
):
    """
    Delete users; IDs that do not exist or lie outside the caller's data scope are skipped

    Args:
        ids: Delimiter-separated user IDs

    Returns:
        Acknowledgment
    """
    requested = SplitIds(ids)

    try:
        id_list = user_service.FilterVisibleIds(requested, BuildDataScopeFilter(current_user))
        removed = user_service.Delete(id_list)
        user_service.InvalidateCaches()
    except Exception as e:
        logger.error(f"Error deleting users: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete users")

    logger.info(f"Admin '{current_user.login_id}' deleted {removed} of {len(requested)} requested users")

    return BuildOk("Deleted successfully", {"removed": removed})


def lock_or_unlock_users(
    ids: str,
    current_user: CurrentUser = Depends(RequireUserEdit),
    user_service: UserService = Depends(GetUserService)
):
    """
    Toggle the activation flag of each user; IDs that do not exist or lie
    outside the caller's data scope are skipped

    Args:
        ids: Delimiter-separated user IDs

    Returns:
        Acknowledgment
    """
    id_list = SplitIds(ids)

    try:
        id_list = user_service.FilterVisibleIds(id_list, BuildDataScopeFilter(current_user))
        toggled = user_service.LockOrUnlock(id_list)
        user_service.InvalidateCaches()
    except Exception as e:
        logger.error(f"Error locking/unlocking users: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to lock or unlock users")

    logger.info(f"Admin '{current_user.login_id}' toggled activation of {toggled} users")

    return BuildOk("Operation succeeded", {"toggled": toggled})


# ==================== Route Table ====================

# Order matters: "/page" must be registered before "/{id}"
USER_ROUTES = [
    ("GET", "/page", get_user_page),
    ("GET", "/{id}", get_user),
    ("POST", "/", save_user),
    ("DELETE", "/{ids}", delete_users),
    ("POST", "/lock/{ids}", lock_or_unlock_users),
]

for method, path, handler in USER_ROUTES:
    router.add_api_route(path, handler, methods=[method])
