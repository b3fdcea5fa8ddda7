"""
onehive/worker/routes.py

Worker Routes
Defines the worker directory endpoints:
- Register, view/update own profile and location (Authenticated)
- Nearby and filtered search listings (Public)
- Assigned and available requests (Authenticated worker)
- Verification, application status and deletion (Admin)
- Application lookup by tracking code and public profile (Public)

Static paths are declared before "/{worker_id}" so they are matched first.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from onehive.core.config import settings
from onehive.core.dependencies import (
    AuthenticatedAdminDep,
    AuthenticatedUserDep,
    AuthenticatedWorkerDep,
    PaginationParams,
    WorkerOrAdminDep,
)
from onehive.core.geo import GeoPoint
from onehive.core.limiter import limiter
from onehive.core.schemas import APIResponse, PaginatedResponse, build_page
from onehive.database.enums import RequestStatus, ServiceType
from onehive.database.session import get_db
from onehive.lifecycle.coordinator import LifecycleCoordinator
from onehive.service_request.schemas import NearbyServiceRequestRead, ServiceRequestRead
from onehive.worker import schemas
from onehive.worker.services import WorkerDirectory

router = APIRouter(prefix="/workers", tags=["Workers"])

DBDep = Annotated[AsyncSession, Depends(get_db)]

WorkerResponse = APIResponse[schemas.WorkerRead]
WorkerPageResponse = APIResponse[PaginatedResponse[schemas.WorkerRead]]


def _read(worker) -> schemas.WorkerRead:
    return schemas.WorkerRead.model_validate(worker)


# ---------------------------------------------------
# Admin Listing
# ---------------------------------------------------
@router.get("", response_model=WorkerPageResponse, summary="List Workers (Admin)")
async def list_workers(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedAdminDep,
    pagination: Annotated[PaginationParams, Depends()],
) -> WorkerPageResponse:
    workers, total = await WorkerDirectory(db).list_all(pagination.skip, pagination.limit)
    return WorkerPageResponse(
        data=build_page([_read(worker) for worker in workers], total, pagination.skip)
    )


# ---------------------------------------------------
# Registration & Own Profile
# ---------------------------------------------------
@router.post(
    "/register",
    response_model=WorkerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register As Worker",
    description="Creates the caller's worker profile and issues an application tracking code.",
)
@limiter.limit("5/minute")
async def register_worker(
    request: Request,
    payload: schemas.WorkerRegister,
    db: DBDep,
    current_user: AuthenticatedUserDep,
) -> WorkerResponse:
    worker = await WorkerDirectory(db).register(current_user, payload)
    return WorkerResponse(message="Worker registration successful", data=_read(worker))


@router.get("/profile", response_model=WorkerResponse, summary="Get My Worker Profile")
async def get_my_profile(
    request: Request,
    db: DBDep,
    current_user: WorkerOrAdminDep,
) -> WorkerResponse:
    worker = await WorkerDirectory(db).get_by_user_or_404(current_user.id)
    return WorkerResponse(data=_read(worker))


@router.put("/profile", response_model=WorkerResponse, summary="Update My Worker Profile")
@limiter.limit("10/minute")
async def update_my_profile(
    request: Request,
    payload: schemas.WorkerUpdate,
    db: DBDep,
    current_user: WorkerOrAdminDep,
) -> WorkerResponse:
    worker = await WorkerDirectory(db).update_profile(current_user.id, payload)
    return WorkerResponse(message="Profile updated successfully", data=_read(worker))


@router.put("/location", response_model=WorkerResponse, summary="Update My Location")
@limiter.limit(settings.RATE_LIMIT_LOCATION)
async def update_my_location(
    request: Request,
    payload: schemas.WorkerLocationUpdate,
    db: DBDep,
    current_user: WorkerOrAdminDep,
) -> WorkerResponse:
    worker = await WorkerDirectory(db).update_location(current_user.id, payload)
    return WorkerResponse(message="Location updated successfully", data=_read(worker))


# ---------------------------------------------------
# Public Discovery
# ---------------------------------------------------
@router.get(
    "/nearby",
    response_model=APIResponse[list[schemas.NearbyWorkerRead]],
    summary="Nearby Workers",
    description="Verified, available workers within the radius, nearest first.",
)
async def nearby_workers(
    request: Request,
    db: DBDep,
    latitude: Annotated[float, Query(ge=-90, le=90)],
    longitude: Annotated[float, Query(ge=-180, le=180)],
    profession: ServiceType | None = None,
    radius: Annotated[float, Query(gt=0, description="Radius in km")] = settings.DEFAULT_SEARCH_RADIUS_KM,
) -> APIResponse[list[schemas.NearbyWorkerRead]]:
    matches = await WorkerDirectory(db).find_nearby(
        GeoPoint(longitude, latitude), radius, profession
    )
    return APIResponse(
        data=[
            schemas.NearbyWorkerRead(**_read(worker).model_dump(), distance_km=distance)
            for worker, distance in matches
        ]
    )


@router.get("/search", response_model=WorkerPageResponse, summary="Search Workers")
async def search_workers(
    request: Request,
    db: DBDep,
    pagination: Annotated[PaginationParams, Depends()],
    profession: ServiceType | None = None,
    city: Annotated[str | None, Query(max_length=100)] = None,
    min_rating: Annotated[float | None, Query(ge=0, le=5)] = None,
    max_hourly_rate: Annotated[float | None, Query(ge=0)] = None,
) -> WorkerPageResponse:
    workers, total = await WorkerDirectory(db).search(
        profession=profession,
        city=city,
        min_rating=min_rating,
        max_hourly_rate=max_hourly_rate,
        skip=pagination.skip,
        limit=pagination.limit,
    )
    return WorkerPageResponse(
        data=build_page([_read(worker) for worker in workers], total, pagination.skip)
    )


# ---------------------------------------------------
# Worker Request Views
# ---------------------------------------------------
@router.get(
    "/my/requests",
    response_model=APIResponse[PaginatedResponse[ServiceRequestRead]],
    summary="My Assigned Requests",
)
async def my_assigned_requests(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedWorkerDep,
    pagination: Annotated[PaginationParams, Depends()],
    status_filter: Annotated[RequestStatus | None, Query(alias="status")] = None,
) -> APIResponse[PaginatedResponse[ServiceRequestRead]]:
    items, total = await LifecycleCoordinator(db).list_assigned_requests(
        current_user, status_filter, pagination.skip, pagination.limit
    )
    return APIResponse(
        data=build_page(
            [ServiceRequestRead.model_validate(item) for item in items], total, pagination.skip
        )
    )


@router.get(
    "/available/requests",
    response_model=APIResponse[list[NearbyServiceRequestRead]],
    summary="Available Requests",
    description="Pending requests of the worker's profession inside the worker's service area.",
)
async def available_requests(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedWorkerDep,
) -> APIResponse[list[NearbyServiceRequestRead]]:
    matches = await WorkerDirectory(db).available_requests(current_user.id)
    return APIResponse(
        data=[
            NearbyServiceRequestRead(
                **ServiceRequestRead.model_validate(item).model_dump(), distance_km=distance
            )
            for item, distance in matches
        ]
    )


# ---------------------------------------------------
# Admin Endpoints
# ---------------------------------------------------
@router.put("/verify/{worker_id}", response_model=WorkerResponse, summary="Verify Worker (Admin)")
@limiter.limit("20/minute")
async def verify_worker(
    request: Request,
    worker_id: UUID,
    payload: schemas.WorkerVerificationUpdate,
    db: DBDep,
    current_user: AuthenticatedAdminDep,
) -> WorkerResponse:
    worker = await WorkerDirectory(db).verify(worker_id, payload)
    return WorkerResponse(message="Worker verification updated", data=_read(worker))


@router.put(
    "/status/{worker_id}", response_model=WorkerResponse, summary="Set Application Status (Admin)"
)
@limiter.limit("20/minute")
async def set_worker_application_status(
    request: Request,
    worker_id: UUID,
    payload: schemas.WorkerApplicationStatusUpdate,
    db: DBDep,
    current_user: AuthenticatedAdminDep,
) -> WorkerResponse:
    worker = await WorkerDirectory(db).set_application_status(worker_id, payload)
    return WorkerResponse(message="Worker status updated", data=_read(worker))


# ---------------------------------------------------
# Public Lookups
# ---------------------------------------------------
@router.get(
    "/track/{tracking_code}",
    response_model=APIResponse[schemas.WorkerApplicationRead],
    summary="Track Application",
)
async def track_application(
    request: Request,
    tracking_code: str,
    db: DBDep,
) -> APIResponse[schemas.WorkerApplicationRead]:
    worker = await WorkerDirectory(db).get_by_tracking_code(tracking_code)
    return APIResponse(data=schemas.WorkerApplicationRead.model_validate(worker))


@router.get("/{worker_id}", response_model=WorkerResponse, summary="Public Worker Profile")
async def get_worker(
    request: Request,
    worker_id: UUID,
    db: DBDep,
) -> WorkerResponse:
    worker = await WorkerDirectory(db).get_or_404(worker_id)
    return WorkerResponse(data=_read(worker))


@router.delete("/{worker_id}", response_model=APIResponse[None], summary="Delete Worker (Admin)")
@limiter.limit("10/minute")
async def delete_worker(
    request: Request,
    worker_id: UUID,
    db: DBDep,
    current_user: AuthenticatedAdminDep,
) -> APIResponse[None]:
    await WorkerDirectory(db).delete(worker_id)
    return APIResponse(message="Worker deleted successfully")
