"""
worker/models.py

Defines SQLAlchemy models specific to the Worker module:
- Worker: Profession, location, service area, availability and rating
  details for a user who offers services
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from onehive.core.geo import GeoPoint
from onehive.database.base import Base, enum_type, utcnow
from onehive.database.enums import ApplicationStatus, ServiceType, VerificationStatus


# ------------------------------------------------------
# Worker Model
# ------------------------------------------------------
class Worker(Base):
    """
    Worker profile owned by exactly one identity (user_id).
    Location is mutated by explicit updates and mirrored from live tracking.
    """

    __tablename__ = "workers"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4, comment="Unique identifier for the worker"
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, index=True, comment="Owning identity (external)"
    )
    contact_email: Mapped[str | None] = mapped_column(
        String(255), nullable=True, comment="Email used for lifecycle notifications"
    )

    # Professional details
    profession: Mapped[ServiceType] = mapped_column(
        enum_type(ServiceType, "service_type"), nullable=False, index=True
    )
    skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    hourly_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    profile_image: Mapped[str] = mapped_column(String, nullable=False, default="")

    # Verification & onboarding
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verification_status: Mapped[VerificationStatus] = mapped_column(
        enum_type(VerificationStatus, "verification_status"),
        nullable=False,
        default=VerificationStatus.PENDING,
    )
    application_status: Mapped[ApplicationStatus] = mapped_column(
        enum_type(ApplicationStatus, "application_status"),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )
    tracking_code: Mapped[str | None] = mapped_column(
        String(32), unique=True, nullable=True, comment="Public application tracking code"
    )

    # Location; (0, 0) means never set
    longitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    latitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    address: Mapped[str] = mapped_column(String, nullable=False, default="")
    city: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    state: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    pincode: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    service_area: Mapped[float] = mapped_column(
        Float, nullable=False, default=10.0, comment="Service radius in kilometers"
    )

    # Availability
    availability: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Stats
    rating_average: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_jobs: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="Incremented when a request is accepted"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
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
