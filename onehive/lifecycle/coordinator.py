"""
onehive/lifecycle/coordinator.py

Lifecycle Coordinator
The single writer of cross-entity transitions between service requests,
workers, tracking sessions and reviews.

Request state machine:
    pending -> accepted | cancelled
    accepted -> in_progress | rejected | cancelled
    in_progress -> completed
    rejected, cancelled and completed are terminal

Tracking state machine (forward only):
    en_route -> arrived -> working -> completed

Every operation validates, then applies compare-and-set writes through the
stores, then commits exactly once. Notifications go out after the commit and
never affect the outcome.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from onehive.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError
from onehive.core.geo import GeoPoint
from onehive.core.notifications import Notifier
from onehive.core.schemas import CurrentUser, to_point
from onehive.database.base import utcnow
from onehive.database.enums import (
    RequestStatus,
    ReviewType,
    TrackingStatus,
    UserRole,
)
from onehive.database.session import commit_or_rollback
from onehive.review.services import RatingAggregator
from onehive.service_request import schemas as request_schemas
from onehive.service_request.models import ServiceRequest
from onehive.service_request.services import ServiceRequestStore, rating_value
from onehive.tracking import schemas as tracking_schemas
from onehive.tracking.models import Tracking
from onehive.tracking.services import TrackingStore
from onehive.worker.models import Worker
from onehive.worker.services import WorkerDirectory

logger = logging.getLogger(__name__)

REJECTED_BY_WORKER = "Rejected by worker"
CANCELLED_BY_CUSTOMER = "Cancelled by customer"

CANCELLABLE = (RequestStatus.PENDING, RequestStatus.ACCEPTED)
TRACKABLE = (RequestStatus.ACCEPTED, RequestStatus.IN_PROGRESS)
TERMINAL = (RequestStatus.REJECTED, RequestStatus.CANCELLED, RequestStatus.COMPLETED)


class LifecycleCoordinator:
    """Orchestrates request, worker, tracking and review writes as single transactions."""

    def __init__(self, db: AsyncSession, notifier: Notifier | None = None) -> None:
        self.db = db
        self.requests = ServiceRequestStore(db)
        self.workers = WorkerDirectory(db)
        self.trackings = TrackingStore(db)
        self.ratings = RatingAggregator(db)
        self.notifier = notifier or Notifier()

    # ---------------------------------------------------
    # Helpers
    # ---------------------------------------------------
    def _refuse(self, message: str) -> InvalidStateError:
        """Guard failure before anything was written; the session is left untouched."""
        logger.warning(f"[LIFECYCLE] {message}")
        return InvalidStateError(message)

    async def _abort(self, message: str) -> InvalidStateError:
        """Rolls back flushed writes of the current operation and builds the error to raise."""
        await self.db.rollback()
        logger.warning(f"[LIFECYCLE] {message}")
        return InvalidStateError(message)

    async def _assigned_worker(self, user: CurrentUser, request: ServiceRequest, action: str) -> Worker:
        worker = await self.workers.get_by_user(user.id)
        if not worker or request.worker_id != worker.id:
            logger.warning(
                f"[RBAC] User {user.id} is not the assigned worker of request {request.id} ({action})"
            )
            raise ForbiddenError(f"Not authorized to {action} this service")
        return worker

    async def _ensure_party(self, user: CurrentUser, request: ServiceRequest) -> None:
        """Customer, assigned worker or admin."""
        if user.role == UserRole.ADMIN or request.customer_id == user.id:
            return
        worker = await self.workers.get_by_user(user.id)
        if worker and request.worker_id == worker.id:
            return
        logger.warning(f"[RBAC] User {user.id} denied access to request {request.id}")
        raise ForbiddenError("Not authorized to view this service request")

    async def _owned_tracking(
        self, user: CurrentUser, tracking_id: UUID, require_live: bool = True
    ) -> tuple[Tracking, Worker]:
        tracking = await self.trackings.get_or_404(tracking_id)
        worker = await self.workers.get_by_user(user.id)
        if not worker or tracking.worker_id != worker.id:
            logger.warning(f"[RBAC] User {user.id} does not own tracking {tracking_id}")
            raise ForbiddenError("Not authorized to update this tracking")
        if require_live and not tracking.is_live:
            logger.warning(f"[TRACKING] Update refused, tracking {tracking_id} is no longer live")
            raise InvalidStateError("Tracking session is no longer live")
        if require_live:
            request = await self.requests.get_or_404(tracking.service_request_id)
            if request.status in TERMINAL:
                logger.warning(
                    f"[TRACKING] Update refused, request {request.id} is {request.status.value}"
                )
                raise InvalidStateError("Service request is no longer active")
        return tracking, worker

    async def _open_tracking_session(
        self,
        request: ServiceRequest,
        worker: Worker,
        origin: GeoPoint,
        address: str,
        estimated_arrival: datetime | None = None,
    ) -> Tracking:
        """Flushes a new live session; a second live session for the request is refused."""
        try:
            return await self.trackings.open_session(
                request, worker.id, origin, address, estimated_arrival
            )
        except IntegrityError:
            raise await self._abort(f"Tracking already active for request {request.id}")

    # ---------------------------------------------------
    # Service Request Operations
    # ---------------------------------------------------
    async def create_request(
        self, user: CurrentUser, payload: request_schemas.ServiceRequestCreate
    ) -> ServiceRequest:
        request = await self.requests.create(user.id, user.email, payload)
        await commit_or_rollback(self.db, "service request creation")
        logger.info(
            f"[LIFECYCLE] Customer {user.id} created request {request.id} ({request.service_type.value})"
        )
        return request

    async def get_request(self, user: CurrentUser, request_id: UUID) -> ServiceRequest:
        request = await self.requests.get_or_404(request_id)
        await self._ensure_party(user, request)
        return request

    async def list_own_requests(
        self, user: CurrentUser, status: RequestStatus | None, skip: int, limit: int
    ) -> tuple[list[ServiceRequest], int]:
        return await self.requests.list_for_customer(user.id, status, skip, limit)

    async def list_assigned_requests(
        self, user: CurrentUser, status: RequestStatus | None, skip: int, limit: int
    ) -> tuple[list[ServiceRequest], int]:
        worker = await self.workers.get_by_user_or_404(user.id)
        return await self.requests.list_for_worker(worker.id, status, skip, limit)

    async def nearby_requests(
        self, user: CurrentUser, origin: GeoPoint, radius_km: float
    ) -> list[tuple[ServiceRequest, float | None]]:
        """Pending requests of the caller's profession around an explicit origin."""
        worker = await self.workers.get_by_user_or_404(user.id)
        return await self.requests.find_nearby_pending(origin, radius_km, worker.profession)

    async def accept(self, user: CurrentUser, request_id: UUID) -> ServiceRequest:
        """pending -> accepted; assigns the caller's worker profile and bumps its job counter."""
        request = await self.requests.get_or_404(request_id)
        worker = await self.workers.get_by_user_or_404(user.id)
        if request.status != RequestStatus.PENDING:
            raise self._refuse("This service request is no longer available")

        accepted = await self.requests.transition(
            request,
            [RequestStatus.PENDING],
            status=RequestStatus.ACCEPTED,
            worker_id=worker.id,
            accepted_at=utcnow(),
        )
        if not accepted:
            raise self._refuse("This service request is no longer available")

        await self.workers.increment_job_counter(worker.id)
        await commit_or_rollback(self.db, "request acceptance")
        logger.info(f"[LIFECYCLE] Request {request.id} accepted by worker {worker.id}")

        await self.notifier.request_accepted(request.customer_email, request.title, request.id)
        return request

    async def reject_or_cancel(
        self, user: CurrentUser, request_id: UUID, reason: str | None = None
    ) -> ServiceRequest:
        """
        The assigned worker rejects, the requesting customer cancels. A caller who is
        both is treated as the worker. Allowed only from pending or accepted.
        """
        request = await self.requests.get_or_404(request_id)
        worker = await self.workers.get_by_user(user.id)
        is_worker = worker is not None and request.worker_id == worker.id
        is_customer = request.customer_id == user.id

        if is_worker:
            new_status, reason = RequestStatus.REJECTED, reason or REJECTED_BY_WORKER
        elif is_customer:
            new_status, reason = RequestStatus.CANCELLED, reason or CANCELLED_BY_CUSTOMER
        else:
            logger.warning(f"[RBAC] User {user.id} may not reject/cancel request {request_id}")
            raise ForbiddenError("Not authorized to reject this service request")

        if request.status not in CANCELLABLE:
            raise self._refuse(
                f"Cannot {'reject' if is_worker else 'cancel'} a request that is {request.status.value}"
            )

        changed = await self.requests.transition(
            request,
            CANCELLABLE,
            status=new_status,
            cancelled_at=utcnow(),
            cancellation_reason=reason,
        )
        if not changed:
            raise self._refuse(f"Request {request_id} changed state concurrently")

        tracking = await self.trackings.get_live_for_request(request.id)
        if tracking:
            await self.trackings.end(tracking)

        # The worker is told about a customer cancellation, the customer about a rejection
        recipient = request.customer_email if new_status == RequestStatus.REJECTED else None
        if new_status == RequestStatus.CANCELLED and request.worker_id:
            assigned = await self.db.get(Worker, request.worker_id)
            recipient = assigned.contact_email if assigned else None

        await commit_or_rollback(self.db, f"request {new_status.value}")
        logger.info(f"[LIFECYCLE] Request {request.id} {new_status.value} by {user.id}: {reason}")

        await self.notifier.request_closed(recipient, request.title, new_status.value, reason)
        return request

    async def start(self, user: CurrentUser, request_id: UUID) -> tuple[ServiceRequest, Tracking]:
        """
        accepted -> in_progress, opening a live tracking session from the worker's
        location towards the request. An already open live session is reused.
        """
        request = await self.requests.get_or_404(request_id)
        worker = await self._assigned_worker(user, request, "start")
        if request.status != RequestStatus.ACCEPTED:
            raise self._refuse("Service must be accepted before starting")

        started = await self.requests.transition(
            request,
            [RequestStatus.ACCEPTED],
            ServiceRequest.worker_id == worker.id,
            status=RequestStatus.IN_PROGRESS,
            started_at=utcnow(),
        )
        if not started:
            raise self._refuse(f"Request {request_id} was started concurrently")

        tracking = await self.trackings.get_live_for_request(request.id)
        if tracking is None:
            tracking = await self._open_tracking_session(
                request, worker, worker.point, worker.address
            )

        try:
            await commit_or_rollback(self.db, "request start")
        except IntegrityError:
            raise await self._abort(f"Tracking already active for request {request.id}")
        logger.info(
            f"[LIFECYCLE] Request {request.id} started by worker {worker.id}, tracking {tracking.id}"
        )

        await self.notifier.worker_en_route(request.customer_email, request.title, request.id)
        return request, tracking

    async def complete(
        self, user: CurrentUser, request_id: UUID, actual_cost: float | None = None
    ) -> ServiceRequest:
        """in_progress -> completed; ends the live tracking session if there is one."""
        request = await self.requests.get_or_404(request_id)
        worker = await self._assigned_worker(user, request, "complete")
        if request.status != RequestStatus.IN_PROGRESS:
            raise self._refuse("Service must be in progress to complete")

        values = {"status": RequestStatus.COMPLETED, "completed_at": utcnow()}
        if actual_cost is not None:
            values["estimated_cost"] = actual_cost
        completed = await self.requests.transition(
            request, [RequestStatus.IN_PROGRESS], ServiceRequest.worker_id == worker.id, **values
        )
        if not completed:
            raise self._refuse(f"Request {request_id} changed state concurrently")

        tracking = await self.trackings.get_live_for_request(request.id)
        if tracking:
            await self.trackings.end(tracking)

        await commit_or_rollback(self.db, "request completion")
        logger.info(f"[LIFECYCLE] Request {request.id} completed by worker {worker.id}")

        await self.notifier.request_completed(
            request.customer_email, request.title, request.id, request.estimated_cost
        )
        return request

    async def rate(
        self, user: CurrentUser, request_id: UUID, payload: request_schemas.RateRequest
    ) -> ServiceRequest:
        """Write-once rating per direction; customer ratings refresh the worker's average."""
        request = await self.requests.get_or_404(request_id)
        direction = payload.review_type

        if direction == ReviewType.CUSTOMER_TO_WORKER:
            if request.customer_id != user.id:
                logger.warning(f"[RBAC] User {user.id} is not the customer of request {request_id}")
                raise ForbiddenError("Only the customer can rate the worker")
        else:
            await self._assigned_worker(user, request, "rate the customer of")

        if request.status != RequestStatus.COMPLETED:
            raise self._refuse("Can only rate completed services")
        if rating_value(request, direction) is not None:
            raise self._refuse("You have already rated this service")
        if request.worker_id is None:
            raise self._refuse("No worker assigned to this service")

        rated = await self.requests.set_rating_once(
            request, direction, payload.rating, payload.review
        )
        if not rated:
            raise self._refuse("You have already rated this service")

        assigned = await self.workers.get_or_404(request.worker_id)
        if direction == ReviewType.CUSTOMER_TO_WORKER:
            reviewee_id, worker_id = assigned.user_id, assigned.id
        else:
            reviewee_id, worker_id = request.customer_id, None

        try:
            await self.ratings.record_review(
                request.id,
                user.id,
                reviewee_id,
                direction,
                payload.rating,
                payload.review,
                worker_id=worker_id,
            )
            if direction == ReviewType.CUSTOMER_TO_WORKER:
                await self.ratings.refresh_worker_rating(assigned.id)
            await commit_or_rollback(self.db, "request rating")
        except IntegrityError:
            raise await self._abort("You have already rated this service")

        logger.info(
            f"[LIFECYCLE] Request {request.id} rated {payload.rating}/5 ({direction.value}) by {user.id}"
        )
        return request

    # ---------------------------------------------------
    # Tracking Operations
    # ---------------------------------------------------
    async def open_tracking(
        self, user: CurrentUser, payload: tracking_schemas.TrackingCreate
    ) -> Tracking:
        """Explicitly opens a live session for an accepted or in-progress request."""
        request = await self.requests.get_or_404(payload.service_request_id)
        worker = await self._assigned_worker(user, request, "track")
        if request.status not in TRACKABLE:
            raise self._refuse(
                f"Tracking requires an accepted or in-progress request, not {request.status.value}"
            )
        if await self.trackings.get_live_for_request(request.id):
            raise self._refuse("Tracking already active for this service")

        origin = to_point(payload.coordinates) if payload.coordinates else worker.point
        address = payload.address or worker.address
        tracking = await self._open_tracking_session(
            request, worker, origin, address, payload.estimated_arrival
        )
        try:
            await commit_or_rollback(self.db, "tracking creation")
        except IntegrityError:
            raise await self._abort("Tracking already active for this service")

        logger.info(f"[TRACKING] Opened tracking {tracking.id} for request {request.id}")
        return tracking

    async def update_tracking_location(
        self, user: CurrentUser, tracking_id: UUID, payload: tracking_schemas.TrackingLocationUpdate
    ) -> Tracking:
        """Appends to the history, moves the current location and mirrors it onto the worker."""
        tracking, worker = await self._owned_tracking(user, tracking_id)
        point = to_point(payload.coordinates)

        try:
            await self.trackings.append_point(tracking, point, payload.address)
            await self.workers.mirror_location(worker.id, point, payload.address)
            await commit_or_rollback(self.db, "tracking location update")
        except IntegrityError:
            raise await self._abort(f"Concurrent location update on tracking {tracking_id}, retry")

        logger.debug(f"[TRACKING] Tracking {tracking.id} at {tuple(point)}")
        return tracking

    async def update_tracking_status(
        self, user: CurrentUser, tracking_id: UUID, new_status: TrackingStatus
    ) -> Tracking:
        """
        Forward-only status change. Reaching arrived (or later) moves an accepted request
        to in_progress; completed also ends the session and completes an in-progress request.
        """
        tracking, _ = await self._owned_tracking(user, tracking_id)
        if new_status == tracking.status:
            return tracking
        if new_status.rank < tracking.status.rank:
            raise self._refuse(
                f"Cannot move tracking from {tracking.status.value} back to {new_status.value}"
            )

        request = await self.requests.get_or_404(tracking.service_request_id)
        await self.trackings.set_status(tracking, new_status)

        now = utcnow()
        if new_status.rank >= TrackingStatus.ARRIVED.rank and request.status == RequestStatus.ACCEPTED:
            await self.requests.transition(
                request,
                [RequestStatus.ACCEPTED],
                status=RequestStatus.IN_PROGRESS,
                started_at=request.started_at or now,
            )
        if new_status == TrackingStatus.COMPLETED and request.status == RequestStatus.IN_PROGRESS:
            await self.requests.transition(
                request,
                [RequestStatus.IN_PROGRESS],
                status=RequestStatus.COMPLETED,
                completed_at=now,
            )

        await commit_or_rollback(self.db, "tracking status update")
        logger.info(
            f"[TRACKING] Tracking {tracking.id} -> {new_status.value}; request {request.id} is {request.status.value}"
        )
        return tracking

    async def end_tracking(self, user: CurrentUser, tracking_id: UUID) -> Tracking:
        """Closes the session whatever its status; ending a closed session changes nothing."""
        tracking, _ = await self._owned_tracking(user, tracking_id, require_live=False)
        if not tracking.is_live:
            return tracking

        await self.trackings.end(tracking)
        await commit_or_rollback(self.db, "tracking end")
        logger.info(f"[TRACKING] Tracking {tracking.id} ended")
        return tracking

    async def get_tracking_for_request(
        self, user: CurrentUser, request_id: UUID
    ) -> tuple[Tracking, ServiceRequest]:
        request = await self.requests.get_or_404(request_id)
        await self._ensure_party(user, request)
        tracking = await self.trackings.get_for_request(request.id)
        if not tracking:
            raise NotFoundError("No tracking found for this service")
        return tracking, request

    async def tracking_history(
        self, user: CurrentUser, skip: int, limit: int
    ) -> tuple[list[tuple[Tracking, ServiceRequest]], int]:
        worker = await self.workers.get_by_user_or_404(user.id)
        return await self.trackings.list_for_worker(worker.id, skip, limit)
