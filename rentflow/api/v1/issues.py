"""Issue reporting endpoints."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.api.deps import get_current_active_user, get_db
from rentflow.core.exceptions import AuthorizationError, NotFoundError
from rentflow.core.permissions import is_operator, require_operator
from rentflow.database import utc_now
from rentflow.domain.issue_state import assert_issue_transition
from rentflow.models.booking import Booking
from rentflow.models.issue import Issue
from rentflow.models.product import Product
from rentflow.models.user import User
from rentflow.schemas.issue import (
    IssueCreate,
    IssueListResponse,
    IssuePriority,
    IssueResponse,
    IssueStatus,
    IssueStatusUpdate,
)
from rentflow.services.notification_service import notification_service

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_issue(db: AsyncSession, issue_id: UUID, user: User) -> Issue:
    result = await db.execute(select(Issue).where(Issue.id == issue_id))
    issue = result.scalar_one_or_none()
    if not issue:
        raise NotFoundError("Issue", str(issue_id))
    if not is_operator(user) and issue.reported_by_id != user.id:
        raise AuthorizationError("You don't have permission to access this issue")
    return issue


@router.post("/", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
async def report_issue(
    request: IssueCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Issue:
    """Report a problem, optionally tied to a product or booking."""
    if request.product_id and not await db.scalar(
        select(Product.id).where(Product.id == request.product_id)
    ):
        raise NotFoundError("Product", str(request.product_id))
    if request.booking_id and not await db.scalar(
        select(Booking.id).where(Booking.id == request.booking_id)
    ):
        raise NotFoundError("Booking", str(request.booking_id))

    issue = Issue(
        title=request.title,
        description=request.description,
        priority=request.priority,
        reported_by_id=current_user.id,
        product_id=request.product_id,
        booking_id=request.booking_id,
    )
    db.add(issue)
    await db.flush()

    logger.info("Issue %s reported by %s (priority %s)", issue.id, current_user.id, issue.priority)
    return issue


@router.get("/", response_model=IssueListResponse)
async def list_issues(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: IssueStatus | None = Query(default=None, alias="status"),
    priority: IssuePriority | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> IssueListResponse:
    """List issues, newest first. Staff and admins see all; others see what they reported."""
    query = select(Issue)
    if not is_operator(current_user):
        query = query.where(Issue.reported_by_id == current_user.id)
    if status_filter:
        query = query.where(Issue.status == status_filter)
    if priority:
        query = query.where(Issue.priority == priority)

    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0

    offset = (page - 1) * page_size
    result = await db.execute(
        query.order_by(Issue.created_at.desc()).offset(offset).limit(page_size)
    )

    return IssueListResponse(
        issues=[IssueResponse.model_validate(i) for i in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{issue_id}", response_model=IssueResponse)
async def get_issue(
    issue_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Issue:
    """Get issue details (reporter, staff or admin)."""
    return await _get_issue(db, issue_id, current_user)


@router.patch("/{issue_id}/status", response_model=IssueResponse)
async def update_issue_status(
    issue_id: UUID,
    request: IssueStatusUpdate,
    current_user: Annotated[User, Depends(require_operator)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Issue:
    """Move an issue through open, in-progress and resolved (staff/admin)."""
    issue = await _get_issue(db, issue_id, current_user)
    if request.resolution_notes is not None:
        issue.resolution_notes = request.resolution_notes

    previous = issue.status
    if request.status == previous:
        await db.flush()
        return issue

    assert_issue_transition(previous, request.status)
    issue.status = request.status
    issue.resolved_at = utc_now() if request.status == "resolved" else None
    await db.flush()

    logger.info(
        "Issue %s status %s -> %s by %s", issue.id, previous, issue.status, current_user.id
    )
    if issue.reported_by_id and issue.reported_by_id != current_user.id:
        await notification_service.notify(
            db,
            user_id=issue.reported_by_id,
            title="Issue Updated",
            message=f"Your issue '{issue.title}' is now {issue.status}.",
            notification_type=notification_service.SYSTEM,
            metadata={"issue_id": str(issue.id), "status": issue.status},
        )
    return issue
