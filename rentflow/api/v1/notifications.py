"""Notification endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.api.deps import get_current_active_user, get_current_admin, get_db
from rentflow.core.exceptions import NotFoundError
from rentflow.database import utc_now
from rentflow.models.notification import Notification
from rentflow.models.user import User
from rentflow.schemas.notification import (
    NotificationCreate,
    NotificationListResponse,
    NotificationResponse,
)
from rentflow.services.notification_service import notification_service

router = APIRouter()


def _visible_to(user: User):
    """Conditions for a user's own, unexpired notifications."""
    return (Notification.user_id == user.id, Notification.expires_at > utc_now())


async def _get_notification(db: AsyncSession, notification_id: UUID, user: User) -> Notification:
    result = await db.execute(
        select(Notification).where(Notification.id == notification_id, *_visible_to(user))
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise NotFoundError("Notification", str(notification_id))
    return notification


@router.get("/", response_model=NotificationListResponse)
async def get_notifications(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    is_read: bool | None = Query(default=None),
    notification_type: str | None = Query(default=None, alias="type"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> NotificationListResponse:
    """Get user's notifications."""
    query = select(Notification).where(*_visible_to(current_user))

    if is_read is not None:
        query = query.where(Notification.is_read == is_read)
    if notification_type:
        query = query.where(Notification.notification_type == notification_type)

    # Count total
    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    # Count unread
    unread_result = await db.execute(
        select(func.count(Notification.id)).where(
            *_visible_to(current_user),
            Notification.is_read.is_(False),
        )
    )
    unread_count = unread_result.scalar() or 0

    # Pagination
    offset = (page - 1) * page_size
    query = query.order_by(Notification.created_at.desc()).offset(offset).limit(page_size)

    result = await db.execute(query)
    notifications = list(result.scalars().all())

    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        total=total,
        unread_count=unread_count,
        page=page,
        page_size=page_size,
    )


@router.post("/", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def create_notification(
    request: NotificationCreate,
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Notification:
    """Send a notification to a user (admin only)."""
    recipient = await db.scalar(select(User.id).where(User.id == request.user_id))
    if recipient is None:
        raise NotFoundError("User", str(request.user_id))

    notification = Notification(
        user_id=request.user_id,
        title=request.title,
        message=request.message,
        notification_type=request.notification_type,
        action_url=request.action_url,
        metadata_=request.metadata,
    )
    db.add(notification)
    await db.flush()
    return notification


@router.patch("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_read(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Mark all notifications as read."""
    await db.execute(
        update(Notification)
        .where(
            Notification.user_id == current_user.id,
            Notification.is_read.is_(False),
        )
        .values(is_read=True, read_at=utc_now())
    )


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Notification:
    """Mark a notification as read."""
    notification = await _get_notification(db, notification_id, current_user)
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utc_now()
        await db.flush()
    return notification


@router.delete("/expired")
async def purge_expired(
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Remove expired notifications now instead of waiting for the scheduler."""
    removed = await notification_service.purge_expired_notifications(db)
    return {"removed": removed}


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete one of your notifications."""
    notification = await _get_notification(db, notification_id, current_user)
    await db.delete(notification)
    await db.flush()
