"""
onehive/tracking/schemas.py

Tracking Schemas
Pydantic schemas for live-tracking operations:
- Opening a session (Authenticated worker)
- Location pushes and status changes
- Reading a session with its location history
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from onehive.core.schemas import Coordinates
from onehive.database.enums import RequestStatus, ServiceType, TrackingStatus


# ---------------------------------------------------
# Write Payloads
# ---------------------------------------------------
class TrackingCreate(BaseModel):
    """Opens a live session for an accepted or in-progress request."""

    service_request_id: UUID = Field(..., description="Request the worker is travelling to")
    coordinates: Coordinates | None = Field(
        default=None, description="Starting [longitude, latitude]; defaults to the worker's location"
    )
    address: str = Field(default="", max_length=255)
    estimated_arrival: datetime | None = None


class TrackingLocationUpdate(BaseModel):
    coordinates: Coordinates = Field(..., description="[longitude, latitude]")
    address: str = Field(default="", max_length=255)


class TrackingStatusUpdate(BaseModel):
    status: TrackingStatus = Field(..., description="en_route, arrived, working or completed")


# ---------------------------------------------------
# Read Schemas
# ---------------------------------------------------
class LocationRead(BaseModel):
    coordinates: list[float] = Field(..., description="[longitude, latitude]")
    address: str = ""
    timestamp: datetime | None = None


class TrackingPointRead(LocationRead):
    position: int


class TrackingRequestInfo(BaseModel):
    """Partial service request information embedded in tracking reads."""

    id: UUID
    title: str
    service_type: ServiceType
    status: RequestStatus
    completed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TrackingRead(BaseModel):
    """A tracking session with its full location history."""

    id: UUID
    service_request_id: UUID
    worker_id: UUID
    customer_id: UUID
    current_location: LocationRead
    destination: LocationRead
    location_history: list[TrackingPointRead] = Field(default_factory=list)
    status: TrackingStatus
    is_live: bool
    estimated_arrival: datetime | None = None
    started_at: datetime
    ended_at: datetime | None = None
    service_request: TrackingRequestInfo | None = None
    created_at: datetime
    updated_at: datetime
