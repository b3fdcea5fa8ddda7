"""
onehive/service_request/schemas.py

Service Request Schemas
Pydantic schemas for service-request operations:
- Request creation (Authenticated customer)
- Reject / cancel, completion and rating payloads
- Reading request details and nearby-request listings
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from onehive.core.schemas import Coordinates
from onehive.database.enums import RequestStatus, ReviewType, ServiceType
from onehive.tracking.schemas import TrackingRead


# ---------------------------------------------------
# Creation Schema (Authenticated Customer)
# ---------------------------------------------------
class ServiceRequestCreate(BaseModel):
    """Schema used when a customer submits a new service request."""

    service_type: ServiceType = Field(..., description="Profession category required")
    title: str = Field(..., min_length=1, max_length=200, description="Short summary of the job")
    description: str = Field(..., min_length=1, description="Details of the work to be done")
    street: str = Field(default="", max_length=255)
    city: str = Field(default="", max_length=100)
    state: str = Field(default="", max_length=100)
    pincode: str = Field(default="", max_length=20)
    coordinates: Coordinates | None = Field(
        default=None, description="[longitude, latitude] of the job site; omitted means unset"
    )
    scheduled_date: date | None = None
    scheduled_time: str | None = Field(default=None, max_length=20, examples=["10:30"])
    estimated_duration: float = Field(default=1, gt=0, description="Estimated duration in hours")
    estimated_cost: float = Field(default=0, ge=0)
    images: list[str] = Field(default_factory=list, description="Image URLs")


# ---------------------------------------------------
# Transition Payloads
# ---------------------------------------------------
class RejectRequest(BaseModel):
    """Reason supplied by a worker rejecting or a customer cancelling."""

    reason: str | None = Field(default=None, max_length=500)


class CompleteRequest(BaseModel):
    """Optional final cost reported by the worker on completion."""

    actual_cost: float | None = Field(default=None, ge=0)


class RateRequest(BaseModel):
    """Write-once rating for a completed request, in one direction."""

    rating: int = Field(..., ge=1, le=5, description="Star rating from 1 to 5")
    review: str | None = Field(default=None, max_length=1000)
    review_type: ReviewType = Field(
        default=ReviewType.CUSTOMER_TO_WORKER,
        description="customer_to_worker (by the customer) or worker_to_customer (by the worker)",
    )


# ---------------------------------------------------
# Read Schemas
# ---------------------------------------------------
class ServiceRequestRead(BaseModel):
    """Full representation of a service request."""

    id: UUID
    customer_id: UUID
    worker_id: UUID | None = None
    service_type: ServiceType
    title: str
    description: str
    street: str
    city: str
    state: str
    pincode: str
    coordinates: list[float] = Field(..., description="[longitude, latitude]")
    scheduled_date: date | None = None
    scheduled_time: str | None = None
    estimated_duration: float
    estimated_cost: float
    images: list[str] = Field(default_factory=list)
    status: RequestStatus
    accepted_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    customer_rating: int | None = None
    customer_review: str | None = None
    worker_rating: int | None = None
    worker_review: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NearbyServiceRequestRead(ServiceRequestRead):
    """Service request annotated with its distance from the search origin."""

    distance_km: float | None = Field(
        default=None, description="Distance in km, rounded to 2 decimals; null when unknown"
    )


class ServiceStartRead(BaseModel):
    """Started request together with the live tracking session it runs under."""

    service_request: ServiceRequestRead
    tracking: TrackingRead
