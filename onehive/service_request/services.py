"""
onehive/service_request/services.py

Service Request Store
Persistence for service requests: creation, lookups, paginated listings,
proximity search over pending requests and compare-and-set status writes.

The store only flushes. Committing is left to the caller so that a lifecycle
operation touching several tables lands in a single transaction.
"""

import logging
from collections.abc import Iterable
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from onehive.core.exceptions import NotFoundError
from onehive.core.geo import GeoPoint, distance_km, within_radius
from onehive.core.schemas import to_point
from onehive.database.base import utcnow
from onehive.database.enums import RequestStatus, ReviewType, ServiceType
from onehive.service_request import schemas
from onehive.service_request.models import ServiceRequest

logger = logging.getLogger(__name__)

# Rating columns written by each direction: (rating, review)
RATING_FIELDS: dict[ReviewType, tuple[str, str]] = {
    ReviewType.CUSTOMER_TO_WORKER: ("customer_rating", "customer_review"),
    ReviewType.WORKER_TO_CUSTOMER: ("worker_rating", "worker_review"),
}


def rating_value(request: ServiceRequest, review_type: ReviewType) -> int | None:
    """Current rating stored on the request for the given direction."""
    return getattr(request, RATING_FIELDS[review_type][0])


def sort_by_distance(matches: list[tuple[Any, float | None]]) -> list[tuple[Any, float | None]]:
    """Nearest first; candidates without a known distance go last, keeping their order."""
    return sorted(matches, key=lambda item: (item[1] is None, item[1] or 0.0))


class ServiceRequestStore:
    """Read/write access to service_requests."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ---------------------------------------------------
    # Lookups
    # ---------------------------------------------------
    async def get(self, request_id: UUID) -> ServiceRequest | None:
        return await self.db.get(ServiceRequest, request_id)

    async def get_or_404(self, request_id: UUID) -> ServiceRequest:
        request = await self.get(request_id)
        if not request:
            logger.warning(f"[LIFECYCLE] Service request not found: request_id={request_id}")
            raise NotFoundError("Service request not found")
        return request

    # ---------------------------------------------------
    # Creation
    # ---------------------------------------------------
    async def create(
        self, customer_id: UUID, customer_email: str | None, payload: schemas.ServiceRequestCreate
    ) -> ServiceRequest:
        """Adds a new pending request with no worker assigned."""
        point = to_point(payload.coordinates)
        request = ServiceRequest(
            customer_id=customer_id,
            customer_email=customer_email,
            service_type=payload.service_type,
            title=payload.title,
            description=payload.description,
            street=payload.street,
            city=payload.city,
            state=payload.state,
            pincode=payload.pincode,
            longitude=point.longitude,
            latitude=point.latitude,
            scheduled_date=payload.scheduled_date,
            scheduled_time=payload.scheduled_time,
            estimated_duration=payload.estimated_duration,
            estimated_cost=payload.estimated_cost,
            images=list(payload.images),
            status=RequestStatus.PENDING,
            worker_id=None,
        )
        self.db.add(request)
        await self.db.flush()
        return request

    # ---------------------------------------------------
    # Listings
    # ---------------------------------------------------
    async def _paginate(
        self, criteria: list[ColumnElement[bool]], skip: int, limit: int
    ) -> tuple[list[ServiceRequest], int]:
        total = await self.db.scalar(
            select(func.count()).select_from(ServiceRequest).where(*criteria)
        )
        result = await self.db.execute(
            select(ServiceRequest)
            .where(*criteria)
            .order_by(ServiceRequest.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def list_for_customer(
        self, customer_id: UUID, status: RequestStatus | None = None, skip: int = 0, limit: int = 10
    ) -> tuple[list[ServiceRequest], int]:
        criteria = [ServiceRequest.customer_id == customer_id]
        if status:
            criteria.append(ServiceRequest.status == status)
        return await self._paginate(criteria, skip, limit)

    async def list_for_worker(
        self, worker_id: UUID, status: RequestStatus | None = None, skip: int = 0, limit: int = 10
    ) -> tuple[list[ServiceRequest], int]:
        criteria = [ServiceRequest.worker_id == worker_id]
        if status:
            criteria.append(ServiceRequest.status == status)
        return await self._paginate(criteria, skip, limit)

    async def find_nearby_pending(
        self, origin: GeoPoint, radius_km: float, service_type: ServiceType | None = None
    ) -> list[tuple[ServiceRequest, float | None]]:
        """
        Pending requests within radius_km of origin.

        Requests whose location was never set are kept, as are all requests
        when the origin itself is unset. Each match carries its distance
        rounded to 2 decimals, or None when either point is unset.
        """
        stmt = select(ServiceRequest).where(ServiceRequest.status == RequestStatus.PENDING)
        if service_type:
            stmt = stmt.where(ServiceRequest.service_type == service_type)
        result = await self.db.execute(stmt.order_by(ServiceRequest.created_at.desc()))

        matches: list[tuple[ServiceRequest, float | None]] = []
        for request in result.scalars().all():
            if not within_radius(origin, request.point, radius_km):
                continue
            distance = None
            if not (origin.is_unset or request.point.is_unset):
                distance = round(distance_km(origin, request.point), 2)
            matches.append((request, distance))

        logger.debug(
            f"[LIFECYCLE] {len(matches)} pending requests within {radius_km} km of {tuple(origin)}"
        )
        return sort_by_distance(matches)

    # ---------------------------------------------------
    # Conditional Writes
    # ---------------------------------------------------
    async def transition(
        self,
        request: ServiceRequest,
        expected: Iterable[RequestStatus],
        *criteria: ColumnElement[bool],
        **values: Any,
    ) -> bool:
        """
        Compare-and-set update: writes values only while the stored status is one
        of expected (plus any extra criteria). Returns False when another writer
        got there first; on success the instance is refreshed from the database.
        """
        result = await self.db.execute(
            update(ServiceRequest)
            .where(
                ServiceRequest.id == request.id,
                ServiceRequest.status.in_(list(expected)),
                *criteria,
            )
            .values(**values, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        await self.db.refresh(request)
        return True

    async def set_rating_once(
        self, request: ServiceRequest, review_type: ReviewType, rating: int, review: str | None
    ) -> bool:
        """Stores the rating for one direction only while that rating is still unset."""
        rating_field, review_field = RATING_FIELDS[review_type]
        rating_column = getattr(ServiceRequest, rating_field)
        return await self.transition(
            request,
            [RequestStatus.COMPLETED],
            rating_column.is_(None),
            **{rating_field: rating, review_field: review},
        )
