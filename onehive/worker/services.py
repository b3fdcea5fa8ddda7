"""
onehive/worker/services.py

Worker Directory
Handles worker-specific logic:
- Registration with tracking-code assignment and default availability
- Profile, location, verification and application-status updates
- Proximity listing of available workers and filtered search
- Pending requests inside a worker's own service area
- Job counter and location mirroring used by lifecycle operations
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from onehive.core.config import settings
from onehive.core.exceptions import InvalidStateError, NotFoundError
from onehive.core.geo import GeoPoint, distance_km, within_radius
from onehive.core.schemas import CurrentUser, to_point
from onehive.database.enums import ServiceType, VerificationStatus
from onehive.database.session import commit_or_rollback
from onehive.service_request.models import ServiceRequest
from onehive.service_request.services import ServiceRequestStore, sort_by_distance
from onehive.worker import schemas
from onehive.worker.models import Worker

logger = logging.getLogger(__name__)

WORKING_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


def default_availability() -> dict[str, dict[str, Any]]:
    """Monday to Saturday 09:00-18:00; Sunday off."""
    availability = {
        day: {"start": "09:00", "end": "18:00", "available": True} for day in WORKING_DAYS
    }
    availability["sunday"] = {"start": "09:00", "end": "18:00", "available": False}
    return availability


class WorkerDirectory:
    """Service class for worker profiles and proximity queries."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ---------------------------------------------------
    # Lookups
    # ---------------------------------------------------
    async def get_or_404(self, worker_id: UUID) -> Worker:
        worker = await self.db.get(Worker, worker_id)
        if not worker:
            logger.warning(f"[WORKER] Worker not found: worker_id={worker_id}")
            raise NotFoundError("Worker not found")
        return worker

    async def get_by_user(self, user_id: UUID) -> Worker | None:
        result = await self.db.execute(select(Worker).where(Worker.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_by_user_or_404(self, user_id: UUID) -> Worker:
        worker = await self.get_by_user(user_id)
        if not worker:
            logger.warning(f"[WORKER] No worker profile for user_id={user_id}")
            raise NotFoundError("Worker profile not found")
        return worker

    async def get_by_tracking_code(self, tracking_code: str) -> Worker:
        result = await self.db.execute(select(Worker).where(Worker.tracking_code == tracking_code))
        worker = result.scalar_one_or_none()
        if not worker:
            raise NotFoundError("Invalid tracking code")
        return worker

    async def list_all(self, skip: int = 0, limit: int = 10) -> tuple[list[Worker], int]:
        total = await self.db.scalar(select(func.count()).select_from(Worker))
        result = await self.db.execute(
            select(Worker).order_by(Worker.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total or 0

    # ---------------------------------------------------
    # Registration
    # ---------------------------------------------------
    async def _next_tracking_code(self) -> str:
        prefix = f"{settings.TRACKING_CODE_PREFIX}-{datetime.now(timezone.utc).year}-"
        issued = await self.db.scalar(
            select(func.count()).select_from(Worker).where(Worker.tracking_code.like(f"{prefix}%"))
        )
        return f"{prefix}{(issued or 0) + 1:04d}"

    async def register(self, user: CurrentUser, payload: schemas.WorkerRegister) -> Worker:
        """Creates the caller's worker profile. A caller may register only once."""
        if await self.get_by_user(user.id):
            logger.warning(f"[WORKER] Duplicate registration attempt by user {user.id}")
            raise InvalidStateError("You are already registered as a worker")

        point = to_point(payload.coordinates)
        availability = (
            {day: slot.model_dump() for day, slot in payload.availability.items()}
            if payload.availability
            else default_availability()
        )
        worker = Worker(
            user_id=user.id,
            contact_email=user.email,
            profession=payload.profession,
            skills=list(payload.skills),
            experience=payload.experience,
            description=payload.description,
            hourly_rate=payload.hourly_rate,
            longitude=point.longitude,
            latitude=point.latitude,
            address=payload.address,
            city=payload.city,
            state=payload.state,
            pincode=payload.pincode,
            service_area=payload.service_area or settings.DEFAULT_SERVICE_AREA_KM,
            availability=availability,
            tracking_code=await self._next_tracking_code(),
        )
        self.db.add(worker)
        try:
            await commit_or_rollback(self.db, "worker registration")
        except IntegrityError:
            logger.warning(f"[WORKER] Registration conflict for user {user.id}")
            raise InvalidStateError("Worker registration conflicted with an existing record, retry")

        logger.info(
            f"[WORKER] Registered worker {worker.id} for user {user.id} ({worker.tracking_code})"
        )
        return worker

    # ---------------------------------------------------
    # Profile & Location Updates
    # ---------------------------------------------------
    async def update_profile(self, user_id: UUID, payload: schemas.WorkerUpdate) -> Worker:
        worker = await self.get_by_user_or_404(user_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(worker, field, value)

        await commit_or_rollback(self.db, "worker profile update")
        logger.info(f"[WORKER] Profile updated for worker {worker.id}: {sorted(changes)}")
        return worker

    async def update_location(
        self, user_id: UUID, payload: schemas.WorkerLocationUpdate
    ) -> Worker:
        worker = await self.get_by_user_or_404(user_id)
        point = to_point(payload.coordinates)
        worker.longitude, worker.latitude = point.longitude, point.latitude
        for field in ("address", "city", "state", "pincode"):
            value = getattr(payload, field)
            if value is not None:
                setattr(worker, field, value)

        await commit_or_rollback(self.db, "worker location update")
        logger.info(f"[WORKER] Location updated for worker {worker.id}: {tuple(point)}")
        return worker

    async def mirror_location(
        self, worker_id: UUID, point: GeoPoint, address: str | None = None
    ) -> None:
        """Copies a tracking fix into the worker record. Flush only; the caller commits."""
        values: dict[str, Any] = {"longitude": point.longitude, "latitude": point.latitude}
        if address:
            values["address"] = address
        await self.db.execute(
            update(Worker)
            .where(Worker.id == worker_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

    async def increment_job_counter(self, worker_id: UUID) -> None:
        """Atomic completed_jobs += 1. Flush only; the caller commits."""
        await self.db.execute(
            update(Worker)
            .where(Worker.id == worker_id)
            .values(completed_jobs=Worker.completed_jobs + 1)
            .execution_options(synchronize_session=False)
        )

    # ---------------------------------------------------
    # Admin Operations
    # ---------------------------------------------------
    async def verify(self, worker_id: UUID, payload: schemas.WorkerVerificationUpdate) -> Worker:
        worker = await self.get_or_404(worker_id)
        if payload.is_verified is not None:
            worker.is_verified = payload.is_verified
        if payload.verification_status is not None:
            worker.verification_status = payload.verification_status
        elif payload.is_verified:
            worker.verification_status = VerificationStatus.VERIFIED

        await commit_or_rollback(self.db, "worker verification")
        logger.info(
            f"[WORKER] Verification for worker {worker.id}: verified={worker.is_verified}, "
            f"status={worker.verification_status.value}"
        )
        return worker

    async def set_application_status(
        self, worker_id: UUID, payload: schemas.WorkerApplicationStatusUpdate
    ) -> Worker:
        worker = await self.get_or_404(worker_id)
        worker.application_status = payload.application_status
        await commit_or_rollback(self.db, "worker application status")
        logger.info(
            f"[WORKER] Application status for worker {worker.id} -> {worker.application_status.value}"
        )
        return worker

    async def delete(self, worker_id: UUID) -> None:
        """Removes a profile that was never assigned a service request."""
        worker = await self.get_or_404(worker_id)
        assigned = await self.db.scalar(
            select(func.count()).select_from(ServiceRequest).where(ServiceRequest.worker_id == worker.id)
        )
        if assigned:
            logger.warning(f"[WORKER] Refused to delete worker {worker.id} with {assigned} requests")
            raise InvalidStateError("Worker has service history and cannot be deleted")

        await self.db.delete(worker)
        await commit_or_rollback(self.db, "worker deletion")
        logger.info(f"[WORKER] Worker {worker_id} deleted")

    # ---------------------------------------------------
    # Proximity & Search
    # ---------------------------------------------------
    async def find_nearby(
        self, origin: GeoPoint, radius_km: float, profession: ServiceType | None = None
    ) -> list[tuple[Worker, float | None]]:
        """Verified, available workers within radius_km of origin, nearest first."""
        stmt = select(Worker).where(Worker.is_verified.is_(True), Worker.is_available.is_(True))
        if profession:
            stmt = stmt.where(Worker.profession == profession)
        result = await self.db.execute(stmt)

        matches: list[tuple[Worker, float | None]] = []
        for worker in result.scalars().all():
            if not within_radius(origin, worker.point, radius_km):
                continue
            distance = None
            if not (origin.is_unset or worker.point.is_unset):
                distance = round(distance_km(origin, worker.point), 2)
            matches.append((worker, distance))

        logger.debug(f"[WORKER] {len(matches)} workers within {radius_km} km of {tuple(origin)}")
        return sort_by_distance(matches)

    async def search(
        self,
        profession: ServiceType | None = None,
        city: str | None = None,
        min_rating: float | None = None,
        max_hourly_rate: float | None = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Worker], int]:
        """Verified workers matching the filters, best rated first."""
        criteria = [Worker.is_verified.is_(True)]
        if profession:
            criteria.append(Worker.profession == profession)
        if city:
            criteria.append(Worker.city.ilike(f"%{city}%"))
        if min_rating is not None:
            criteria.append(Worker.rating_average >= min_rating)
        if max_hourly_rate is not None:
            criteria.append(Worker.hourly_rate <= max_hourly_rate)

        total = await self.db.scalar(select(func.count()).select_from(Worker).where(*criteria))
        result = await self.db.execute(
            select(Worker)
            .where(*criteria)
            .order_by(Worker.rating_average.desc(), Worker.completed_jobs.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def available_requests(
        self, user_id: UUID
    ) -> list[tuple[ServiceRequest, float | None]]:
        """Pending requests for the worker's profession inside the worker's service area."""
        worker = await self.get_by_user_or_404(user_id)
        return await ServiceRequestStore(self.db).find_nearby_pending(
            worker.point, worker.service_area, worker.profession
        )
