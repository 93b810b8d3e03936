"""
OrgAdmin Server - User Service

Persistence operations for user accounts: paged lookup, upsert,
bulk delete, lock/unlock and the uniqueness queries used before saving.

The uniqueness checks are advisory. Two concurrent saves can both pass
them; the UNIQUE constraints on sys_user are what actually hold, and an
IntegrityError on commit is reported as a conflict.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from models.database import User, Role, UserRole, Org, Permission, RolePermission, NewId
from models.api import UserForm, UserResult, PageRequest, PageResult, SORTABLE_COLUMNS
from exceptions import OrgAdminConflictError, OrgAdminNotFoundError, OrgAdminValidationError

logger = logging.getLogger(__name__)


# Properties that CheckByProperty may be asked about
UNIQUE_PROPERTIES = ("login_id", "email")

# Form fields copied verbatim onto the record
PROFILE_FIELDS = ("login_id", "avatar", "org_id", "name", "phone", "email", "lang_key")


class UserService:
    """
    Owns every read and write of sys_user and its role assignments
    """

    def __init__(self, db_manager, cache_manager):
        """
        Initialize user service

        Args:
            db_manager: DatabaseManager providing sessions and password hashing
            cache_manager: UserCacheManager cleared after every mutation
        """
        self.db_manager = db_manager
        self.cache_manager = cache_manager

    # ==================== Queries ====================

    def FindPage(self, page_request: PageRequest, scope_filter=None) -> PageResult:
        """
        Get one page of users visible to the caller

        Args:
            page_request: Paging, ordering and filter parameters
            scope_filter: SQLAlchemy clause restricting visible rows (None for no restriction)

        Returns:
            PageResult with role names resolved
        """
        session = self.db_manager.GetSession()

        try:
            query = session.query(User).options(joinedload(User.org))

            if scope_filter is not None:
                query = query.filter(scope_filter)
            if page_request.login_id:
                query = query.filter(User.login_id.contains(page_request.login_id))
            if page_request.name:
                query = query.filter(User.name.contains(page_request.name))
            if page_request.email:
                query = query.filter(User.email.contains(page_request.email.lower()))
            if page_request.org_id:
                query = query.filter(User.org_id == page_request.org_id)
            if page_request.activated is not None:
                query = query.filter(User.activated == page_request.activated)

            total = query.count()

            sort_name = page_request.sort_name if page_request.sort_name in SORTABLE_COLUMNS else "created_at"
            column = getattr(User, sort_name)
            order = column.asc() if page_request.sort_order == "asc" else column.desc()

            users = (
                query.order_by(order, User.id)
                .offset((page_request.page - 1) * page_request.size)
                .limit(page_request.size)
                .all()
            )

            user_ids = [user.id for user in users]
            roles_by_user = self.FindUserRoles(session, user_ids)
            authorities_by_user = self.FindAuthorities(session, user_ids)

            items = [
                self.CopyBeanToResult(user, roles_by_user.get(user.id, []), authorities_by_user.get(user.id, []))
                for user in users
            ]

            return PageResult(page=page_request.page, size=page_request.size, total=total, items=items)

        finally:
            session.close()

    def FindOneById(self, user_id: str) -> Optional[User]:
        """
        Get a user by ID

        Args:
            user_id: User ID

        Returns:
            User (detached, org loaded) or None
        """
        session = self.db_manager.GetSession()
        try:
            return session.query(User).options(joinedload(User.org)).filter(User.id == user_id).first()
        finally:
            session.close()

    def FindResultById(self, user_id: str) -> Optional[UserResult]:
        """
        Get a user by ID as a result shape, roles and authorities included

        Args:
            user_id: User ID

        Returns:
            UserResult or None
        """
        user = self.FindOneById(user_id)
        if user is None:
            return None

        # Roles are a second, explicit query rather than a lazy relationship
        session = self.db_manager.GetSession()
        try:
            roles = self.FindUserRoles(session, [user.id]).get(user.id, [])
            authorities = self.FindAuthorities(session, [user.id]).get(user.id, [])
            return self.CopyBeanToResult(user, roles, authorities)
        finally:
            session.close()

    @staticmethod
    def FindUserRoles(session, user_ids: List[str]) -> Dict[str, List[Role]]:
        """
        Load role assignments for a set of users with one join query

        Args:
            session: SQLAlchemy session
            user_ids: User IDs to load

        Returns:
            dict: user_id -> list of Role, ordered by role name
        """
        if not user_ids:
            return {}

        rows = (
            session.query(UserRole.user_id, Role)
            .select_from(UserRole)
            .join(Role, Role.id == UserRole.role_id)
            .filter(UserRole.user_id.in_(user_ids))
            .order_by(Role.name)
            .all()
        )

        roles_by_user: Dict[str, List[Role]] = {}
        for user_id, role in rows:
            roles_by_user.setdefault(user_id, []).append(role)
        return roles_by_user

    @staticmethod
    def FindAuthorities(session, user_ids: List[str]) -> Dict[str, List[str]]:
        """
        Load the permission names granted to each user through their roles

        Args:
            session: SQLAlchemy session
            user_ids: User IDs to load

        Returns:
            dict: user_id -> sorted list of permission names
        """
        if not user_ids:
            return {}

        rows = (
            session.query(UserRole.user_id, Permission.permission_name)
            .select_from(UserRole)
            .join(RolePermission, RolePermission.role_id == UserRole.role_id)
            .join(Permission, Permission.permission_id == RolePermission.permission_id)
            .filter(UserRole.user_id.in_(user_ids))
            .distinct()
            .all()
        )

        authorities: Dict[str, List[str]] = {}
        for user_id, permission_name in rows:
            authorities.setdefault(user_id, []).append(permission_name)
        return {user_id: sorted(names) for user_id, names in authorities.items()}

    def FilterVisibleIds(self, ids: List[str], scope_filter=None) -> List[str]:
        """
        Keep only the IDs of existing users that fall inside a data scope

        Args:
            ids: Requested user IDs
            scope_filter: SQLAlchemy clause restricting visible rows (None for no restriction)

        Returns:
            list: Visible IDs in request order
        """
        if not ids:
            return []

        session = self.db_manager.GetSession()
        try:
            query = session.query(User.id).filter(User.id.in_(ids))
            if scope_filter is not None:
                query = query.filter(scope_filter)
            visible = {user_id for (user_id,) in query}
            return [user_id for user_id in ids if user_id in visible]
        finally:
            session.close()

    def CheckByProperty(self, property_name: str, value: str, exclude_id: Optional[str] = None) -> bool:
        """
        Check whether another user already holds a unique value

        Args:
            property_name: "login_id" or "email"
            value: Value to look for
            exclude_id: ID of the user being saved, ignored in the match

        Returns:
            bool: True if a conflicting record exists
        """
        if property_name not in UNIQUE_PROPERTIES:
            raise ValueError(f"Unsupported unique property: {property_name}")

        session = self.db_manager.GetSession()
        try:
            query = session.query(User.id).filter(getattr(User, property_name) == value)
            if exclude_id:
                query = query.filter(User.id != exclude_id)
            return query.first() is not None
        finally:
            session.close()

    # ==================== Mutations ====================

    def Save(self, user_form: UserForm) -> User:
        """
        Create or update a user, depending on whether the form carries an ID

        On update an empty password keeps the stored hash. On create a
        password is required. Role assignments are replaced by role_id_list
        when it is supplied and kept as they are when it is None.

        Args:
            user_form: Validated write form

        Returns:
            User: The saved (detached) record

        Raises:
            OrgAdminNotFoundError: Update of an unknown ID
            OrgAdminValidationError: Missing password on create, unknown role or org
            OrgAdminConflictError: Storage-level unique constraint violated
        """
        session = self.db_manager.GetSession()
        now = datetime.now(timezone.utc)

        try:
            if user_form.id:
                user = session.query(User).filter(User.id == user_form.id).first()
                if user is None:
                    raise OrgAdminNotFoundError(f"User with ID {user_form.id} not found")
                if user_form.password:
                    user.password_hash = self.db_manager.HashPassword(user_form.password)
            else:
                if not user_form.password:
                    raise OrgAdminValidationError("Password is required for a new user")
                user = User(
                    id=NewId(),
                    password_hash=self.db_manager.HashPassword(user_form.password),
                    created_at=now
                )
                session.add(user)

            if user_form.org_id and not session.query(Org.id).filter(Org.id == user_form.org_id).first():
                raise OrgAdminValidationError(f"Invalid org_id: {user_form.org_id}")

            for field in PROFILE_FIELDS:
                setattr(user, field, getattr(user_form, field))
            if user_form.activated is not None:
                user.activated = user_form.activated
            elif user.activated is None:
                user.activated = True
            user.last_modified_at = now
            session.flush()

            if user_form.role_id_list is not None:
                self._ReplaceRoles(session, user.id, user_form.role_id_list)
            session.commit()

            return user

        except IntegrityError as e:
            session.rollback()
            logger.warning(f"Unique constraint rejected save of user '{user_form.login_id}': {e.orig}")
            raise OrgAdminConflictError("Login ID or email already in use") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _ReplaceRoles(self, session, user_id: str, role_ids: List[str]):
        """Replace a user's role assignments, rejecting unknown role IDs"""
        wanted = list(dict.fromkeys(role_ids))
        if wanted:
            known = {role_id for (role_id,) in session.query(Role.id).filter(Role.id.in_(wanted))}
            unknown = [role_id for role_id in wanted if role_id not in known]
            if unknown:
                raise OrgAdminValidationError(f"Invalid role_id: {', '.join(unknown)}")

        session.query(UserRole).filter(UserRole.user_id == user_id).delete(synchronize_session=False)
        for role_id in wanted:
            session.add(UserRole(user_id=user_id, role_id=role_id))

    def Delete(self, ids: List[str]) -> int:
        """
        Delete users by ID; unknown IDs are ignored

        Args:
            ids: User IDs

        Returns:
            int: Number of users removed
        """
        if not ids:
            return 0

        session = self.db_manager.GetSession()
        try:
            session.query(UserRole).filter(UserRole.user_id.in_(ids)).delete(synchronize_session=False)
            removed = session.query(User).filter(User.id.in_(ids)).delete(synchronize_session=False)
            session.commit()
            return removed
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def LockOrUnlock(self, ids: List[str]) -> int:
        """
        Flip the activation flag of each user; unknown IDs are ignored

        Args:
            ids: User IDs

        Returns:
            int: Number of users toggled
        """
        if not ids:
            return 0

        session = self.db_manager.GetSession()
        now = datetime.now(timezone.utc)
        try:
            users = session.query(User).filter(User.id.in_(set(ids))).all()
            for user in users:
                user.activated = not user.activated
                user.last_modified_at = now
            session.commit()
            return len(users)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def InvalidateCaches(self):
        """Clear cached user lookups after a mutation"""
        self.cache_manager.ClearAll()

    # ==================== Mapping ====================

    @staticmethod
    def CopyBeanToResult(user: User, roles: List[Role] = None, authorities: List[str] = None) -> UserResult:
        """
        Build the read shape of a user; credential fields never leave here

        Args:
            user: User record (org relationship loaded)
            roles: Roles assigned to the user
            authorities: Permission names granted to the user

        Returns:
            UserResult
        """
        roles = roles or []
        role_id_list = [role.id for role in roles]

        return UserResult(
            id=user.id,
            login_id=user.login_id,
            avatar=user.avatar,
            org_id=user.org_id,
            org_name=user.org.name if user.org else None,
            name=user.name,
            phone=user.phone,
            email=user.email,
            activated=bool(user.activated),
            lang_key=user.lang_key,
            reset_date=user.reset_date,
            created_at=user.created_at,
            last_modified_at=user.last_modified_at,
            role_id_list=role_id_list,
            role_ids=",".join(role_id_list),
            role_names=",".join(role.name for role in roles),
            authorities=authorities or []
        )
