"""
onehive/review/schemas.py

Review Schemas
- Reading reviews left on completed service requests (Public)
- Rating summary for a worker (Public)
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from onehive.database.enums import ReviewType


class ReviewRead(BaseModel):
    """Review as returned to callers."""

    id: UUID
    service_request_id: UUID
    reviewer_id: UUID
    reviewee_id: UUID
    worker_id: UUID | None = None
    review_type: ReviewType
    rating: int = Field(..., ge=1, le=5)
    review: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkerRatingSummary(BaseModel):
    """Average rating (one decimal) and review count for a worker."""

    worker_id: UUID
    average_rating: float = Field(..., ge=0, le=5)
    total_reviews: int = Field(..., ge=0)
