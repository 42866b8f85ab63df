"""
Security guards for role-based and ownership-based access control.

Roles are read from the users table on every request, not from the token:
the identity provider knows who the principal is, only we know what they may do.
"""

from typing import List, Optional
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from bookcourier.app.core.dependencies import get_current_principal
from bookcourier.app.core.exceptions import InsufficientPermissionsError
from bookcourier.app.core.identity import Principal
from bookcourier.app.db.session import get_db
from bookcourier.app.models.enums import UserRole
from bookcourier.app.models.user import User


async def get_stored_role(db: AsyncSession, email: str) -> UserRole:
    """
    Look up a principal's stored role.

    A principal with no user record (or no role) is treated as USER.
    """
    result = await db.execute(select(User.role).where(User.email == email))
    role = result.scalar_one_or_none()
    return role or UserRole.USER


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Roles are flat: an ADMIN does not pass a LIBRARIAN-only check unless
    ADMIN is listed explicitly.

    Usage:
        @router.post("/books")
        async def create_book(principal: Principal = Depends(require_role([UserRole.LIBRARIAN]))):
            ...

    Args:
        allowed_roles: List of UserRole enums that are allowed to access the endpoint

    Returns:
        FastAPI dependency function that validates the stored role

    Raises:
        InsufficientPermissionsError (403) if the role is not in allowed_roles
    """
    async def role_checker(
        principal: Principal = Depends(get_current_principal),
        db: AsyncSession = Depends(get_db)
    ) -> Principal:
        user_role = await get_stored_role(db, principal.email)

        if user_role not in allowed_roles:
            raise InsufficientPermissionsError(
                details={"required_roles": [r.value for r in allowed_roles], "role": user_role.value}
            )

        return principal

    return role_checker


require_admin = require_role([UserRole.ADMIN])
require_librarian = require_role([UserRole.LIBRARIAN])


class OwnershipGuard:
    """
    Ownership guard for records scoped to one user's email.

    Usage:
        ownership_guard = OwnershipGuard()

        @router.delete("/wishlists/{wishlist_id}")
        async def remove(wishlist_id: int, principal: Principal = Depends(get_current_principal), ...):
            item = await db.get(Wishlist, wishlist_id)
            ownership_guard.enforce(item.user_email, principal, "wishlist entry")
    """

    def is_owner(self, owner_email: Optional[str], principal: Principal) -> bool:
        return owner_email is not None and owner_email.lower() == principal.email

    def enforce(
        self,
        owner_email: Optional[str],
        principal: Principal,
        resource_name: str = "resource"
    ):
        """
        Enforce ownership validation, raise 403 if access denied.

        Args:
            owner_email: Email the record belongs to
            principal: Current authenticated principal
            resource_name: Name of resource for error message

        Raises:
            InsufficientPermissionsError 403 if ownership check fails
        """
        if not self.is_owner(owner_email, principal):
            raise InsufficientPermissionsError(
                f"Access denied. You do not have permission to access this {resource_name}."
            )
