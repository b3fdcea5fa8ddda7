"""
onehive/service_request/routes.py

Service Request Routes
Defines the service-request lifecycle endpoints:
- Create a request, list own requests, get one (Authenticated users)
- Nearby pending requests (Authenticated worker)
- Accept, start, complete (Authenticated worker)
- Reject / cancel and rate (request parties)

All endpoints require authentication.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from onehive.core.config import settings
from onehive.core.dependencies import (
    AuthenticatedUserDep,
    AuthenticatedWorkerDep,
    PaginationParams,
)
from onehive.core.geo import GeoPoint
from onehive.core.limiter import limiter
from onehive.core.schemas import APIResponse, PaginatedResponse, build_page
from onehive.database.enums import RequestStatus
from onehive.database.session import get_db
from onehive.lifecycle.coordinator import LifecycleCoordinator
from onehive.service_request import schemas
from onehive.tracking.services import construct_tracking_read

router = APIRouter(prefix="/services", tags=["Service Requests"])

DBDep = Annotated[AsyncSession, Depends(get_db)]

RequestResponse = APIResponse[schemas.ServiceRequestRead]


def _read(service_request) -> schemas.ServiceRequestRead:
    return schemas.ServiceRequestRead.model_validate(service_request)


# ---------------------------------------------------
# Customer Endpoints (Create, List, Detail)
# ---------------------------------------------------
@router.post(
    "",
    response_model=RequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Service Request",
    description="Customer submits a new service request. It starts out pending with no worker.",
)
@limiter.limit("10/minute")
async def create_service_request(
    request: Request,
    payload: schemas.ServiceRequestCreate,
    db: DBDep,
    current_user: AuthenticatedUserDep,
) -> RequestResponse:
    service_request = await LifecycleCoordinator(db).create_request(current_user, payload)
    return RequestResponse(message="Service request created successfully", data=_read(service_request))


@router.get(
    "",
    response_model=APIResponse[PaginatedResponse[schemas.ServiceRequestRead]],
    summary="List My Service Requests",
)
async def list_my_service_requests(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedUserDep,
    pagination: Annotated[PaginationParams, Depends()],
    status_filter: Annotated[RequestStatus | None, Query(alias="status")] = None,
) -> APIResponse[PaginatedResponse[schemas.ServiceRequestRead]]:
    """Requests submitted by the caller, newest first."""
    items, total = await LifecycleCoordinator(db).list_own_requests(
        current_user, status_filter, pagination.skip, pagination.limit
    )
    return APIResponse(data=build_page([_read(item) for item in items], total, pagination.skip))


@router.get(
    "/nearby/requests",
    response_model=APIResponse[list[schemas.NearbyServiceRequestRead]],
    summary="Nearby Pending Requests",
    description="Pending requests of the worker's profession around the given point.",
)
async def nearby_service_requests(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedWorkerDep,
    latitude: Annotated[float, Query(ge=-90, le=90)],
    longitude: Annotated[float, Query(ge=-180, le=180)],
    radius: Annotated[float, Query(gt=0, description="Radius in km")] = settings.DEFAULT_SEARCH_RADIUS_KM,
) -> APIResponse[list[schemas.NearbyServiceRequestRead]]:
    matches = await LifecycleCoordinator(db).nearby_requests(
        current_user, GeoPoint(longitude, latitude), radius
    )
    return APIResponse(
        data=[
            schemas.NearbyServiceRequestRead(**_read(item).model_dump(), distance_km=distance)
            for item, distance in matches
        ]
    )


@router.get(
    "/{request_id}",
    response_model=RequestResponse,
    summary="Get Service Request",
    description="Visible to the requesting customer, the assigned worker and admins.",
)
async def get_service_request(
    request: Request,
    request_id: UUID,
    db: DBDep,
    current_user: AuthenticatedUserDep,
) -> RequestResponse:
    service_request = await LifecycleCoordinator(db).get_request(current_user, request_id)
    return RequestResponse(data=_read(service_request))


# ---------------------------------------------------
# Lifecycle Transitions
# ---------------------------------------------------
@router.put("/{request_id}/accept", response_model=RequestResponse, summary="Accept Request")
@limiter.limit("10/minute")
async def accept_service_request(
    request: Request,
    request_id: UUID,
    db: DBDep,
    current_user: AuthenticatedWorkerDep,
) -> RequestResponse:
    """Worker accepts a pending request. Exactly one concurrent caller can win."""
    service_request = await LifecycleCoordinator(db).accept(current_user, request_id)
    return RequestResponse(message="Service request accepted", data=_read(service_request))


@router.put("/{request_id}/reject", response_model=RequestResponse, summary="Reject / Cancel Request")
@limiter.limit("10/minute")
async def reject_service_request(
    request: Request,
    request_id: UUID,
    db: DBDep,
    current_user: AuthenticatedUserDep,
    payload: schemas.RejectRequest | None = None,
) -> RequestResponse:
    """The assigned worker rejects; the requesting customer cancels."""
    service_request = await LifecycleCoordinator(db).reject_or_cancel(
        current_user, request_id, payload.reason if payload else None
    )
    message = (
        "Service request rejected"
        if service_request.status == RequestStatus.REJECTED
        else "Service request cancelled"
    )
    return RequestResponse(message=message, data=_read(service_request))


@router.put(
    "/{request_id}/start",
    response_model=APIResponse[schemas.ServiceStartRead],
    summary="Start Service",
    description="Assigned worker starts an accepted request; a live tracking session is opened.",
)
@limiter.limit("10/minute")
async def start_service_request(
    request: Request,
    request_id: UUID,
    db: DBDep,
    current_user: AuthenticatedWorkerDep,
) -> APIResponse[schemas.ServiceStartRead]:
    service_request, tracking = await LifecycleCoordinator(db).start(current_user, request_id)
    return APIResponse(
        message="Service started",
        data=schemas.ServiceStartRead(
            service_request=_read(service_request), tracking=construct_tracking_read(tracking)
        ),
    )


@router.put("/{request_id}/complete", response_model=RequestResponse, summary="Complete Service")
@limiter.limit("10/minute")
async def complete_service_request(
    request: Request,
    request_id: UUID,
    db: DBDep,
    current_user: AuthenticatedWorkerDep,
    payload: schemas.CompleteRequest | None = None,
) -> RequestResponse:
    service_request = await LifecycleCoordinator(db).complete(
        current_user, request_id, payload.actual_cost if payload else None
    )
    return RequestResponse(message="Service completed successfully", data=_read(service_request))


@router.put("/{request_id}/rate", response_model=RequestResponse, summary="Rate Service")
@limiter.limit("5/minute")
async def rate_service_request(
    request: Request,
    request_id: UUID,
    payload: schemas.RateRequest,
    db: DBDep,
    current_user: AuthenticatedUserDep,
) -> RequestResponse:
    """Write-once rating of a completed request, one per direction."""
    service_request = await LifecycleCoordinator(db).rate(current_user, request_id, payload)
    return RequestResponse(message="Rating submitted successfully", data=_read(service_request))
