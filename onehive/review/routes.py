"""
onehive/review/routes.py

Review Routes
- List reviews received by a worker (Public)
- Rating summary for a worker (Public)

Reviews are written through PUT /api/services/{id}/rate.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from onehive.core.dependencies import PaginationParams
from onehive.core.schemas import APIResponse, PaginatedResponse, build_page
from onehive.database.session import get_db
from onehive.review import schemas
from onehive.review.services import RatingAggregator

router = APIRouter(prefix="/reviews", tags=["Reviews"])

DBDep = Annotated[AsyncSession, Depends(get_db)]


@router.get(
    "/worker/{worker_id}",
    response_model=APIResponse[PaginatedResponse[schemas.ReviewRead]],
    summary="Get Reviews for Worker",
)
async def get_worker_reviews(
    request: Request,
    worker_id: UUID,
    db: DBDep,
    pagination: Annotated[PaginationParams, Depends()],
) -> APIResponse[PaginatedResponse[schemas.ReviewRead]]:
    reviews, total = await RatingAggregator(db).list_for_worker(
        worker_id, pagination.skip, pagination.limit
    )
    items = [schemas.ReviewRead.model_validate(review) for review in reviews]
    return APIResponse(data=build_page(items, total, pagination.skip))


@router.get(
    "/worker/{worker_id}/summary",
    response_model=APIResponse[schemas.WorkerRatingSummary],
    summary="Get Worker Review Summary",
)
async def get_worker_review_summary(
    request: Request,
    worker_id: UUID,
    db: DBDep,
) -> APIResponse[schemas.WorkerRatingSummary]:
    summary = await RatingAggregator(db).summary_for_worker(worker_id)
    return APIResponse(data=summary)
