"""User endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.api.deps import get_current_active_user, get_current_admin, get_db
from rentflow.core.exceptions import AuthorizationError, BadRequestError, NotFoundError
from rentflow.models.user import User
from rentflow.schemas.reporting import UserStatsResponse
from rentflow.schemas.user import UserAdminUpdate, UserResponse
from rentflow.services.reporting_service import reporting_service

router = APIRouter()


async def _get_user(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", str(user_id))
    return user


def _ensure_self_or_admin(current_user: User, user_id: UUID) -> None:
    if current_user.role != "admin" and current_user.id != user_id:
        raise AuthorizationError("You can only access your own profile")


@router.get("/", response_model=list[UserResponse])
async def list_users(
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    role: str | None = Query(default=None),
    is_active: bool | None = Query(default=None),
    search: str | None = Query(default=None, max_length=100),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> list[User]:
    """List users (admin only)."""
    query = select(User)
    if role:
        query = query.where(User.role == role)
    if is_active is not None:
        query = query.where(User.is_active == is_active)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(or_(func.lower(User.name).like(pattern), User.email.like(pattern)))

    offset = (page - 1) * page_size
    result = await db.execute(
        query.order_by(User.created_at.desc()).offset(offset).limit(page_size)
    )
    return list(result.scalars().all())


@router.get("/admin/stats", response_model=UserStatsResponse)
async def get_user_stats(
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Account statistics for the admin dashboard."""
    return await reporting_service.get_user_stats(db)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get a user profile (self or admin)."""
    _ensure_self_or_admin(current_user, user_id)
    return await _get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    updates: UserAdminUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Update a user profile. Role and account flags are admin-only."""
    _ensure_self_or_admin(current_user, user_id)
    user = await _get_user(db, user_id)

    update_data = updates.model_dump(exclude_unset=True)
    admin_fields = {"role", "is_verified", "is_active"} & update_data.keys()
    if admin_fields and current_user.role != "admin":
        raise AuthorizationError(f"Only admins can change: {', '.join(sorted(admin_fields))}")

    for field, value in update_data.items():
        setattr(user, field, value)
    await db.flush()

    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    current_user: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a user account (admin only, never your own)."""
    if current_user.id == user_id:
        raise BadRequestError("You cannot delete your own account")
    user = await _get_user(db, user_id)
    await db.delete(user)
    await db.flush()
