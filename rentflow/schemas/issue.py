"""Issue Pydantic schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

IssuePriority = Literal["low", "medium", "high"]
IssueStatus = Literal["open", "in-progress", "resolved"]


class IssueCreate(BaseModel):
    """Schema for reporting an issue."""

    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    priority: IssuePriority = "medium"
    product_id: UUID | None = None
    booking_id: UUID | None = None


class IssueStatusUpdate(BaseModel):
    """Schema for moving an issue to another status."""

    status: IssueStatus
    resolution_notes: str | None = Field(None, max_length=5000)


class IssueResponse(BaseModel):
    """Schema for issue response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str
    priority: str
    status: str
    reported_by_id: UUID | None
    product_id: UUID | None
    booking_id: UUID | None
    resolution_notes: str | None
    resolved_at: datetime | None
    created_at: datetime
    updated_at: datetime


class IssueListResponse(BaseModel):
    """Schema for paginated issue list."""

    issues: list[IssueResponse]
    total: int
    page: int
    page_size: int
