"""
review/models.py

Defines the Review model for storing service-request feedback.
- One review per (service request, direction)
- Supports star ratings, optional text, and soft deactivation
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import CheckConstraint

from onehive.database.base import Base, enum_type, utcnow
from onehive.database.enums import ReviewType


class Review(Base):
    """
    Rating left by one party of a completed service request about the other.
    Includes a star rating (1-5), optional review text and an active flag.
    """

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="rating_range"),
        UniqueConstraint("service_request_id", "review_type", name="uq_reviews_request_direction"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4, comment="Unique identifier for the review"
    )
    service_request_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("service_requests.id", name="fk_reviews_service_request_id"),
        nullable=False,
        index=True,
    )
    reviewer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, comment="Identity that wrote the review"
    )
    reviewee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, index=True, comment="Identity being reviewed"
    )
    worker_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("workers.id", name="fk_reviews_worker_id"),
        nullable=True,
        index=True,
        comment="Set when the reviewee is a worker",
    )
    review_type: Mapped[ReviewType] = mapped_column(
        enum_type(ReviewType, "review_type"), nullable=False
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False, comment="Star rating from 1 to 5")
    review: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
