"""
onehive/core/schemas.py

Core Schemas

Defines core Pydantic models used across the application, including:
- Generic success envelope and paginated list schema.
- Coordinates payload type shared by requests, workers and tracking.
- The authenticated principal and the token claims it is built from.
"""

from typing import Annotated, Generic, TypeVar
from uuid import UUID

from pydantic import AfterValidator, BaseModel, EmailStr, Field

from onehive.core.geo import GeoPoint
from onehive.database.enums import UserRole

# Define a type variable for the items in the paginated response
T = TypeVar("T")


# ---------------------------------------------------
# Envelopes
# ---------------------------------------------------
class APIResponse(BaseModel, Generic[T]):
    """
    Success envelope wrapping every response payload.
    """

    success: bool = Field(default=True, description="Always true for successful calls")
    message: str | None = Field(default=None, description="Human-readable outcome")
    data: T | None = Field(default=None, description="Response payload")


class ErrorResponse(BaseModel):
    """Failure envelope produced by the exception handlers."""

    success: bool = Field(default=False)
    message: str = Field(..., description="Human-readable error message")


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Generic schema for paginated list responses.
    """

    total_count: int = Field(..., description="Total number of items available")
    has_next_page: bool = Field(..., description="Indicates if there are more items available")
    items: list[T] = Field(..., description="List of items for the current page")


def build_page(items: list[T], total: int, skip: int) -> PaginatedResponse[T]:
    """Wraps one page of items, deriving has_next_page from the offset."""
    return PaginatedResponse(
        total_count=total, has_next_page=skip + len(items) < total, items=items
    )


# ---------------------------------------------------
# Coordinates
# ---------------------------------------------------
def _check_coordinates(value: list[float]) -> list[float]:
    longitude, latitude = value
    if not -180 <= longitude <= 180:
        raise ValueError("longitude must be between -180 and 180")
    if not -90 <= latitude <= 90:
        raise ValueError("latitude must be between -90 and 90")
    return value


Coordinates = Annotated[
    list[float],
    Field(min_length=2, max_length=2, description="[longitude, latitude]"),
    AfterValidator(_check_coordinates),
]


def to_point(coordinates: list[float] | None) -> GeoPoint:
    """Converts wire coordinates to a GeoPoint, mapping None to the unset sentinel."""
    if not coordinates:
        return GeoPoint(0.0, 0.0)
    return GeoPoint(float(coordinates[0]), float(coordinates[1]))


# ---------------------------------------------------
# Authenticated Principal
# ---------------------------------------------------
class TokenPayload(BaseModel):
    """Claims this service reads from identity-service tokens."""

    sub: UUID
    role: UserRole
    email: EmailStr | None = None
    jti: str | None = None


class CurrentUser(BaseModel):
    """Caller identity and role as trusted from the token."""

    id: UUID
    role: UserRole
    email: EmailStr | None = None
