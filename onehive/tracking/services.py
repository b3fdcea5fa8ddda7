"""
onehive/tracking/services.py

Tracking Session Store
Persistence for live-tracking sessions and their append-only location history.

Rules kept here:
- A session is seeded with exactly one history point (position 0)
- History points are only ever appended, with consecutive positions
- The destination is copied from the request once and never changed

Like the other stores it only flushes; lifecycle operations commit.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from onehive.core.exceptions import NotFoundError
from onehive.core.geo import GeoPoint
from onehive.database.base import utcnow
from onehive.database.enums import TrackingStatus
from onehive.service_request.models import ServiceRequest
from onehive.tracking import schemas
from onehive.tracking.models import Tracking, TrackingPoint

logger = logging.getLogger(__name__)


# ---------------------------------------------------
# Read Model Construction
# ---------------------------------------------------
def construct_tracking_read(
    tracking: Tracking, request: ServiceRequest | None = None
) -> schemas.TrackingRead:
    """Builds the API representation of a session, optionally embedding its request."""
    return schemas.TrackingRead(
        id=tracking.id,
        service_request_id=tracking.service_request_id,
        worker_id=tracking.worker_id,
        customer_id=tracking.customer_id,
        current_location=schemas.LocationRead(
            coordinates=list(tracking.current_point),
            address=tracking.current_address,
            timestamp=tracking.current_timestamp,
        ),
        destination=schemas.LocationRead(
            coordinates=list(tracking.destination_point),
            address=tracking.destination_address,
        ),
        location_history=[
            schemas.TrackingPointRead(
                position=point.position,
                coordinates=[point.longitude, point.latitude],
                address=point.address,
                timestamp=point.recorded_at,
            )
            for point in tracking.points
        ],
        status=tracking.status,
        is_live=tracking.is_live,
        estimated_arrival=tracking.estimated_arrival,
        started_at=tracking.started_at,
        ended_at=tracking.ended_at,
        service_request=(
            schemas.TrackingRequestInfo.model_validate(request) if request is not None else None
        ),
        created_at=tracking.created_at,
        updated_at=tracking.updated_at,
    )


class TrackingStore:
    """Read/write access to trackings and tracking_points."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ---------------------------------------------------
    # Lookups
    # ---------------------------------------------------
    async def get_or_404(self, tracking_id: UUID) -> Tracking:
        tracking = await self.db.get(Tracking, tracking_id)
        if not tracking:
            logger.warning(f"[TRACKING] Tracking not found: tracking_id={tracking_id}")
            raise NotFoundError("Tracking not found")
        return tracking

    async def get_live_for_request(self, request_id: UUID) -> Tracking | None:
        result = await self.db.execute(
            select(Tracking).where(
                Tracking.service_request_id == request_id, Tracking.is_live.is_(True)
            )
        )
        return result.scalar_one_or_none()

    async def get_for_request(self, request_id: UUID) -> Tracking | None:
        """The live session of a request if one exists, else its most recent one."""
        result = await self.db.execute(
            select(Tracking)
            .where(Tracking.service_request_id == request_id)
            .order_by(Tracking.is_live.desc(), Tracking.started_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def _paginate_with_requests(
        self, criteria: list, skip: int, limit: int
    ) -> tuple[list[tuple[Tracking, ServiceRequest]], int]:
        total = await self.db.scalar(select(func.count()).select_from(Tracking).where(*criteria))
        result = await self.db.execute(
            select(Tracking, ServiceRequest)
            .join(ServiceRequest, Tracking.service_request_id == ServiceRequest.id)
            .where(*criteria)
            .order_by(Tracking.started_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return [(row[0], row[1]) for row in result.all()], total or 0

    async def list_live(
        self, skip: int = 0, limit: int = 10
    ) -> tuple[list[tuple[Tracking, ServiceRequest]], int]:
        return await self._paginate_with_requests([Tracking.is_live.is_(True)], skip, limit)

    async def list_for_worker(
        self, worker_id: UUID, skip: int = 0, limit: int = 10
    ) -> tuple[list[tuple[Tracking, ServiceRequest]], int]:
        return await self._paginate_with_requests([Tracking.worker_id == worker_id], skip, limit)

    # ---------------------------------------------------
    # Writes
    # ---------------------------------------------------
    async def open_session(
        self,
        request: ServiceRequest,
        worker_id: UUID,
        origin: GeoPoint,
        address: str = "",
        estimated_arrival: datetime | None = None,
    ) -> Tracking:
        """
        Adds a live en_route session for the request, seeded with one history point.
        A concurrent second live session for the same request fails the flush
        with IntegrityError.
        """
        now = utcnow()
        tracking = Tracking(
            service_request_id=request.id,
            worker_id=worker_id,
            customer_id=request.customer_id,
            current_longitude=origin.longitude,
            current_latitude=origin.latitude,
            current_address=address,
            current_timestamp=now,
            destination_longitude=request.longitude,
            destination_latitude=request.latitude,
            destination_address=", ".join(
                part for part in (request.street, request.city, request.state, request.pincode) if part
            ),
            status=TrackingStatus.EN_ROUTE,
            is_live=True,
            estimated_arrival=estimated_arrival,
            started_at=now,
        )
        tracking.points.append(
            TrackingPoint(
                position=0,
                longitude=origin.longitude,
                latitude=origin.latitude,
                address=address,
                recorded_at=now,
            )
        )
        self.db.add(tracking)
        await self.db.flush()
        return tracking

    async def append_point(self, tracking: Tracking, point: GeoPoint, address: str) -> None:
        """Appends a history point and makes it the current location."""
        now = utcnow()
        tracking.points.append(
            TrackingPoint(
                position=len(tracking.points),
                longitude=point.longitude,
                latitude=point.latitude,
                address=address,
                recorded_at=now,
            )
        )
        tracking.current_longitude = point.longitude
        tracking.current_latitude = point.latitude
        tracking.current_address = address
        tracking.current_timestamp = now
        await self.db.flush()

    async def set_status(self, tracking: Tracking, status: TrackingStatus) -> None:
        tracking.status = status
        if status == TrackingStatus.COMPLETED:
            tracking.is_live = False
            tracking.ended_at = utcnow()
        await self.db.flush()

    async def end(self, tracking: Tracking) -> None:
        """Closes the session regardless of its current status."""
        tracking.is_live = False
        tracking.status = TrackingStatus.COMPLETED
        tracking.ended_at = utcnow()
        await self.db.flush()
