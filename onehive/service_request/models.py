"""
service_request/models.py

Defines the ServiceRequest model.
- Represents work submitted by a customer and handled by a worker
- Tracks status transitions, assignment, lifecycle timestamps and write-once ratings
"""

import uuid
from datetime import date, datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from onehive.core.geo import GeoPoint
from onehive.database.base import Base, enum_type, utcnow
from onehive.database.enums import RequestStatus, ServiceType


# MODEL: ServiceRequest
class ServiceRequest(Base):
    __tablename__ = "service_requests"
    __table_args__ = (
        CheckConstraint(
            "customer_rating IS NULL OR (customer_rating >= 1 AND customer_rating <= 5)",
            name="customer_rating_range",
        ),
        CheckConstraint(
            "worker_rating IS NULL OR (worker_rating >= 1 AND worker_rating <= 5)",
            name="worker_rating_range",
        ),
    )

    # Basic Identifiers & Foreign Keys
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4, comment="Unique identifier for the request"
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, index=True, comment="Identity of the requesting customer"
    )
    customer_email: Mapped[str | None] = mapped_column(
        String(255), nullable=True, comment="Customer email snapshot for notifications"
    )
    worker_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("workers.id", name="fk_service_requests_worker_id"),
        nullable=True,
        index=True,
        comment="Worker assigned on acceptance",
    )

    # Request details
    service_type: Mapped[ServiceType] = mapped_column(
        enum_type(ServiceType, "service_type"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    street: Mapped[str] = mapped_column(String, nullable=False, default="")
    city: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    state: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    pincode: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    longitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    latitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    scheduled_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    estimated_duration: Mapped[float] = mapped_column(
        Float, nullable=False, default=1, comment="Estimated duration in hours"
    )
    estimated_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Status & Lifecycle Timestamps
    status: Mapped[RequestStatus] = mapped_column(
        enum_type(RequestStatus, "request_status"),
        nullable=False,
        default=RequestStatus.PENDING,
        index=True,
    )
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Write-once ratings: customer_* is given by the customer, worker_* by the worker
    customer_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    customer_review: Mapped[str | None] = mapped_column(Text, nullable=True)
    worker_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    worker_review: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Audit Fields
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.longitude, self.latitude)

    @property
    def coordinates(self) -> list[float]:
        return [self.longitude, self.latitude]
