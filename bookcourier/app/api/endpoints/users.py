"""
User API Endpoints.

First sign-in registration, role lookup, and admin role management.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from bookcourier.app.db.session import get_db
from bookcourier.app.models.user import User
from bookcourier.app.models.enums import UserRole
from bookcourier.app.schemas.common import MutationResponse
from bookcourier.app.schemas.user import UserCreate, UserResponse, RoleResponse, RoleUpdate
from bookcourier.app.core.dependencies import get_current_principal
from bookcourier.app.core.exceptions import ResourceNotFoundError
from bookcourier.app.core.guards import require_admin, get_stored_role
from bookcourier.app.core.identity import Principal
from bookcourier.app.services.audit import log_event, AuditAction
from bookcourier.app.services.identifiers import generate_user_id

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=MutationResponse)
async def create_user(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a user on first sign-in.

    Creates the user with role `user` if the email is unknown; an existing
    email is a no-op reported in the body. Concurrent first sign-ins for the
    same email resolve to one insert; the losers get the no-op response.
    """
    if await _find_user(db, user_data.email):
        return MutationResponse(success=False, message="User already exists")

    new_user = User(
        user_id=generate_user_id(),
        name=user_data.name,
        email=user_data.email,
        photo_url=user_data.photo_url,
        role=UserRole.USER,
    )
    db.add(new_user)
    await log_event(
        db=db,
        action=AuditAction.USER_CREATED,
        actor_email=new_user.email,
        target_type="user",
        target_id=new_user.user_id,
        commit=False
    )

    try:
        await db.commit()
    except IntegrityError:
        # Another request registered the same email first
        await db.rollback()
        return MutationResponse(success=False, message="User already exists")

    await db.refresh(new_user)
    return MutationResponse(success=True, message="User created", inserted_id=new_user.id)


@router.get("", response_model=List[UserResponse])
async def search_users(
    search_text: Optional[str] = Query(None, alias="searchText", description="Match on name or email"),
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    List users, optionally filtered by a case-insensitive match on name or
    email (admin-only).
    """
    query = select(User).order_by(User.created_at.desc(), User.id.desc())

    if search_text:
        pattern = f"%{search_text}%"
        query = query.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{email}/role", response_model=RoleResponse)
async def get_user_role(
    email: str = Path(..., description="User email"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Return a user's stored role; unknown users are reported as `user`."""
    role = await get_stored_role(db, email.lower())
    return RoleResponse(role=role)


@router.patch("/{user_id}/role", response_model=MutationResponse)
async def update_user_role(
    role_data: RoleUpdate,
    user_id: int = Path(..., description="User ID"),
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Change a user's role (admin-only)."""
    user = await db.get(User, user_id)
    if not user:
        raise ResourceNotFoundError("User", user_id)

    previous_role = user.role
    user.role = role_data.role
    await log_event(
        db=db,
        action=AuditAction.ROLE_CHANGED,
        actor_email=admin.email,
        target_type="user",
        target_id=user.user_id,
        metadata={"from": previous_role.value, "to": role_data.role.value},
        commit=False
    )
    await db.commit()

    return MutationResponse(
        success=True,
        message=f"Role changed to {role_data.role.value}",
        modified_count=int(previous_role != role_data.role)
    )


async def _find_user(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()
