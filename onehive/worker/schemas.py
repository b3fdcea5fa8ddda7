"""
onehive/worker/schemas.py

Worker Schemas
Defines Pydantic models for worker-related operations:
- Registration and profile updates
- Location updates
- Admin verification / application status changes
- Public reads, nearby listings and application tracking
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from onehive.core.schemas import Coordinates
from onehive.database.enums import ApplicationStatus, ServiceType, VerificationStatus

Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


# ---------------------------------------------------
# Availability
# ---------------------------------------------------
class DayAvailability(BaseModel):
    """Working window for a single weekday."""

    start: str = Field(default="09:00", pattern=r"^\d{2}:\d{2}$")
    end: str = Field(default="18:00", pattern=r"^\d{2}:\d{2}$")
    available: bool = True


# ---------------------------------------------------
# Registration & Profile Updates
# ---------------------------------------------------
class WorkerRegister(BaseModel):
    """Payload for registering the caller as a worker."""

    profession: ServiceType = Field(..., description="Profession category")
    skills: list[str] = Field(default_factory=list)
    experience: int = Field(default=0, ge=0, description="Years of experience")
    description: str = Field(default="", max_length=2000)
    hourly_rate: float = Field(default=0, ge=0)
    address: str = Field(default="", max_length=255)
    city: str = Field(default="", max_length=100)
    state: str = Field(default="", max_length=100)
    pincode: str = Field(default="", max_length=20)
    coordinates: Coordinates | None = Field(default=None, description="[longitude, latitude]")
    service_area: float | None = Field(default=None, gt=0, description="Service radius in km")
    availability: dict[Weekday, DayAvailability] | None = None


class WorkerUpdate(BaseModel):
    """Partial update of the caller's own worker profile."""

    skills: list[str] | None = None
    experience: int | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=2000)
    hourly_rate: float | None = Field(default=None, ge=0)
    service_area: float | None = Field(default=None, gt=0)
    availability: dict[Weekday, DayAvailability] | None = None
    is_available: bool | None = None
    profile_image: str | None = None


class WorkerLocationUpdate(BaseModel):
    """Explicit location update of the caller's own profile."""

    coordinates: Coordinates = Field(..., description="[longitude, latitude]")
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    pincode: str | None = Field(default=None, max_length=20)


# ---------------------------------------------------
# Admin Updates
# ---------------------------------------------------
class WorkerVerificationUpdate(BaseModel):
    is_verified: bool | None = None
    verification_status: VerificationStatus | None = None


class WorkerApplicationStatusUpdate(BaseModel):
    application_status: ApplicationStatus


# ---------------------------------------------------
# Read Schemas
# ---------------------------------------------------
class WorkerRead(BaseModel):
    """Worker profile as returned to callers."""

    id: UUID
    user_id: UUID
    profession: ServiceType
    skills: list[str] = Field(default_factory=list)
    experience: int
    description: str
    hourly_rate: float
    profile_image: str
    is_verified: bool
    verification_status: VerificationStatus
    application_status: ApplicationStatus
    tracking_code: str | None = None
    coordinates: list[float] = Field(..., description="[longitude, latitude]")
    address: str
    city: str
    state: str
    pincode: str
    service_area: float
    availability: dict[str, DayAvailability] = Field(default_factory=dict)
    is_available: bool
    rating_average: float
    rating_count: int
    completed_jobs: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NearbyWorkerRead(WorkerRead):
    """Worker annotated with distance from the search origin."""

    distance_km: float | None = Field(
        default=None, description="Distance in km, rounded to 2 decimals; null when unknown"
    )


class WorkerApplicationRead(BaseModel):
    """Public view of an application looked up by tracking code."""

    tracking_code: str
    profession: ServiceType
    application_status: ApplicationStatus
    verification_status: VerificationStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
