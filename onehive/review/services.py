"""
onehive/review/services.py

Rating Aggregator
Business logic for reviews attached to completed service requests:
- Record a review for one direction of a request (called by the lifecycle coordinator)
- Recompute a worker's running average and review count
- Retrieve reviews and the rating summary for a worker (Public)
"""

import logging
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from onehive.core.exceptions import NotFoundError
from onehive.database.enums import ReviewType
from onehive.review import schemas
from onehive.review.models import Review
from onehive.worker.models import Worker

logger = logging.getLogger(__name__)


# ---------------------------------------------------
# Rating Aggregator
# ---------------------------------------------------
class RatingAggregator:
    """Stores reviews and maintains Worker.rating_average / rating_count."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _worker_review_criteria(self, worker_id: UUID) -> list:
        return [
            Review.worker_id == worker_id,
            Review.review_type == ReviewType.CUSTOMER_TO_WORKER,
            Review.is_active.is_(True),
        ]

    # ---------------------------------------------------
    # Writes (flush only; the lifecycle operation commits)
    # ---------------------------------------------------
    async def record_review(
        self,
        service_request_id: UUID,
        reviewer_id: UUID,
        reviewee_id: UUID,
        review_type: ReviewType,
        rating: int,
        review: str | None,
        worker_id: UUID | None = None,
    ) -> Review:
        entry = Review(
            service_request_id=service_request_id,
            reviewer_id=reviewer_id,
            reviewee_id=reviewee_id,
            worker_id=worker_id,
            review_type=review_type,
            rating=rating,
            review=review or "",
        )
        self.db.add(entry)
        await self.db.flush()
        logger.info(
            f"[REVIEW] {review_type.value} review recorded for request {service_request_id}: {rating}/5"
        )
        return entry

    async def refresh_worker_rating(self, worker_id: UUID) -> tuple[float, int]:
        """Recomputes the worker's average (one decimal) and count from active reviews."""
        row = (
            await self.db.execute(
                select(func.avg(Review.rating), func.count(Review.id)).where(
                    *self._worker_review_criteria(worker_id)
                )
            )
        ).one()
        average = round(float(row[0]), 1) if row[0] is not None else 0.0
        count = row[1] or 0

        await self.db.execute(
            update(Worker)
            .where(Worker.id == worker_id)
            .values(rating_average=average, rating_count=count)
            .execution_options(synchronize_session=False)
        )
        logger.info(f"[REVIEW] Worker {worker_id} rating -> {average} over {count} reviews")
        return average, count

    # ---------------------------------------------------
    # Reads
    # ---------------------------------------------------
    async def _ensure_worker(self, worker_id: UUID) -> None:
        if not await self.db.get(Worker, worker_id):
            logger.warning(f"[REVIEW] Worker not found: worker_id={worker_id}")
            raise NotFoundError("Worker not found")

    async def list_for_worker(
        self, worker_id: UUID, skip: int = 0, limit: int = 10
    ) -> tuple[list[Review], int]:
        await self._ensure_worker(worker_id)
        criteria = self._worker_review_criteria(worker_id)
        total = await self.db.scalar(select(func.count()).select_from(Review).where(*criteria))
        result = await self.db.execute(
            select(Review)
            .where(*criteria)
            .order_by(Review.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def summary_for_worker(self, worker_id: UUID) -> schemas.WorkerRatingSummary:
        await self._ensure_worker(worker_id)
        row = (
            await self.db.execute(
                select(func.avg(Review.rating), func.count(Review.id)).where(
                    *self._worker_review_criteria(worker_id)
                )
            )
        ).one()
        return schemas.WorkerRatingSummary(
            worker_id=worker_id,
            average_rating=round(float(row[0]), 1) if row[0] is not None else 0.0,
            total_reviews=row[1] or 0,
        )
