"""
onehive/tracking/routes.py

Tracking Routes
Live-tracking endpoints:
- Open a session, push locations, change status, end (Authenticated worker)
- Get the session of a request (request parties and admins)
- List live sessions (Admin)
- Own tracking history (Authenticated worker)
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from onehive.core.config import settings
from onehive.core.dependencies import (
    AuthenticatedAdminDep,
    AuthenticatedUserDep,
    AuthenticatedWorkerDep,
    PaginationParams,
)
from onehive.core.limiter import limiter
from onehive.core.schemas import APIResponse, PaginatedResponse, build_page
from onehive.database.session import get_db
from onehive.lifecycle.coordinator import LifecycleCoordinator
from onehive.tracking import schemas
from onehive.tracking.services import TrackingStore, construct_tracking_read

router = APIRouter(prefix="/tracking", tags=["Tracking"])

DBDep = Annotated[AsyncSession, Depends(get_db)]

TrackingResponse = APIResponse[schemas.TrackingRead]
TrackingPageResponse = APIResponse[PaginatedResponse[schemas.TrackingRead]]


# ---------------------------------------------------
# Worker Endpoints
# ---------------------------------------------------
@router.post(
    "",
    response_model=TrackingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start Tracking",
    description="Assigned worker opens a live session for an accepted or in-progress request.",
)
@limiter.limit("10/minute")
async def create_tracking(
    request: Request,
    payload: schemas.TrackingCreate,
    db: DBDep,
    current_user: AuthenticatedWorkerDep,
) -> TrackingResponse:
    tracking = await LifecycleCoordinator(db).open_tracking(current_user, payload)
    return TrackingResponse(message="Tracking started", data=construct_tracking_read(tracking))


@router.put("/{tracking_id}/location", response_model=TrackingResponse, summary="Update Location")
@limiter.limit(settings.RATE_LIMIT_LOCATION)
async def update_tracking_location(
    request: Request,
    tracking_id: UUID,
    payload: schemas.TrackingLocationUpdate,
    db: DBDep,
    current_user: AuthenticatedWorkerDep,
) -> TrackingResponse:
    tracking = await LifecycleCoordinator(db).update_tracking_location(
        current_user, tracking_id, payload
    )
    return TrackingResponse(message="Location updated", data=construct_tracking_read(tracking))


@router.put("/{tracking_id}/status", response_model=TrackingResponse, summary="Update Status")
@limiter.limit("30/minute")
async def update_tracking_status(
    request: Request,
    tracking_id: UUID,
    payload: schemas.TrackingStatusUpdate,
    db: DBDep,
    current_user: AuthenticatedWorkerDep,
) -> TrackingResponse:
    tracking = await LifecycleCoordinator(db).update_tracking_status(
        current_user, tracking_id, payload.status
    )
    return TrackingResponse(message="Status updated", data=construct_tracking_read(tracking))


@router.put("/{tracking_id}/end", response_model=TrackingResponse, summary="End Tracking")
@limiter.limit("10/minute")
async def end_tracking(
    request: Request,
    tracking_id: UUID,
    db: DBDep,
    current_user: AuthenticatedWorkerDep,
) -> TrackingResponse:
    tracking = await LifecycleCoordinator(db).end_tracking(current_user, tracking_id)
    return TrackingResponse(message="Tracking ended", data=construct_tracking_read(tracking))


@router.get("/history", response_model=TrackingPageResponse, summary="My Tracking History")
async def tracking_history(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedWorkerDep,
    pagination: Annotated[PaginationParams, Depends()],
) -> TrackingPageResponse:
    rows, total = await LifecycleCoordinator(db).tracking_history(
        current_user, pagination.skip, pagination.limit
    )
    items = [construct_tracking_read(tracking, service_request) for tracking, service_request in rows]
    return TrackingPageResponse(data=build_page(items, total, pagination.skip))


# ---------------------------------------------------
# Shared / Admin Endpoints
# ---------------------------------------------------
@router.get("/live", response_model=TrackingPageResponse, summary="Live Sessions")
async def list_live_tracking(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedAdminDep,
    pagination: Annotated[PaginationParams, Depends()],
) -> TrackingPageResponse:
    rows, total = await TrackingStore(db).list_live(pagination.skip, pagination.limit)
    items = [construct_tracking_read(tracking, service_request) for tracking, service_request in rows]
    return TrackingPageResponse(data=build_page(items, total, pagination.skip))


@router.get(
    "/service/{request_id}",
    response_model=TrackingResponse,
    summary="Tracking For Request",
    description="The live session of a request if any, else its most recent one.",
)
async def get_tracking_for_service(
    request: Request,
    request_id: UUID,
    db: DBDep,
    current_user: AuthenticatedUserDep,
) -> TrackingResponse:
    tracking, service_request = await LifecycleCoordinator(db).get_tracking_for_request(
        current_user, request_id
    )
    return TrackingResponse(data=construct_tracking_read(tracking, service_request))
