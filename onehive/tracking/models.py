"""
tracking/models.py

Defines the live-tracking models:
- Tracking: One dispatch of a worker towards a service request
- TrackingPoint: Append-only location history of a Tracking session

At most one Tracking row per service request may have is_live = true;
the partial unique index below enforces it in the database.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from onehive.core.geo import GeoPoint
from onehive.database.base import Base, enum_type, utcnow
from onehive.database.enums import TrackingStatus


# ------------------------------------------------------
# Tracking Model
# ------------------------------------------------------
class Tracking(Base):
    __tablename__ = "trackings"
    __table_args__ = (
        Index(
            "uq_trackings_live_service_request",
            "service_request_id",
            unique=True,
            postgresql_where=text("is_live"),
            sqlite_where=text("is_live = 1"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    service_request_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("service_requests.id", name="fk_trackings_service_request_id"),
        nullable=False,
        index=True,
    )
    worker_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("workers.id", name="fk_trackings_worker_id"), nullable=False, index=True
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # Latest position
    current_longitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    current_latitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    current_address: Mapped[str] = mapped_column(String, nullable=False, default="")
    current_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Destination is copied from the service request at creation and never changes
    destination_longitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    destination_latitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    destination_address: Mapped[str] = mapped_column(String, nullable=False, default="")

    status: Mapped[TrackingStatus] = mapped_column(
        enum_type(TrackingStatus, "tracking_status"),
        nullable=False,
        default=TrackingStatus.EN_ROUTE,
    )
    is_live: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    estimated_arrival: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # One-to-Many: ordered, append-only location history
    points: Mapped[list["TrackingPoint"]] = relationship(
        "TrackingPoint",
        back_populates="tracking",
        order_by="TrackingPoint.position",
        lazy="selectin",
        cascade="save-update, merge",
    )

    @property
    def current_point(self) -> GeoPoint:
        return GeoPoint(self.current_longitude, self.current_latitude)

    @property
    def destination_point(self) -> GeoPoint:
        return GeoPoint(self.destination_longitude, self.destination_latitude)


# ------------------------------------------------------
# TrackingPoint Model
# ------------------------------------------------------
class TrackingPoint(Base):
    __tablename__ = "tracking_points"
    __table_args__ = (
        Index("uq_tracking_points_position", "tracking_id", "position", unique=True),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tracking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("trackings.id", name="fk_tracking_points_tracking_id"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str] = mapped_column(String, nullable=False, default="")
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    tracking: Mapped["Tracking"] = relationship("Tracking", back_populates="points")
