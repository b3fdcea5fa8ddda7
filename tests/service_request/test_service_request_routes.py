"""
tests/service_request/test_service_request_routes.py

Unit tests for service_request/routes.py covering:
- Creation, listing and detail endpoints
- Accept / reject / start / complete / rate transitions
- Role restrictions and payload validation
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from uuid import UUID, uuid4

import pytest
from fastapi import status
from httpx import AsyncClient

from onehive.core.exceptions import InvalidStateError
from onehive.core.geo import GeoPoint
from onehive.core.schemas import CurrentUser
from onehive.database.enums import RequestStatus, ReviewType, ServiceType, TrackingStatus
from onehive.lifecycle.coordinator import LifecycleCoordinator
from onehive.service_request.models import ServiceRequest
from onehive.tracking.models import Tracking, TrackingPoint


def create_fake_request(
    customer_id: UUID | None = None,
    status: RequestStatus = RequestStatus.PENDING,
    worker_id: UUID | None = None,
    **overrides,
) -> ServiceRequest:
    now = datetime.now(timezone.utc)
    values = dict(
        id=uuid4(),
        customer_id=customer_id or uuid4(),
        worker_id=worker_id,
        service_type=ServiceType.PLUMBER,
        title="Leaking kitchen tap",
        description="Tap drips constantly",
        street="12 Residency Rd",
        city="Bangalore",
        state="Karnataka",
        pincode="560025",
        longitude=77.59,
        latitude=12.97,
        estimated_duration=1.5,
        estimated_cost=400.0,
        images=[],
        status=status,
        created_at=now - timedelta(hours=1),
        updated_at=now,
    )
    values.update(overrides)
    return ServiceRequest(**values)


def create_fake_tracking(service_request: ServiceRequest) -> Tracking:
    now = datetime.now(timezone.utc)
    return Tracking(
        id=uuid4(),
        service_request_id=service_request.id,
        worker_id=service_request.worker_id or uuid4(),
        customer_id=service_request.customer_id,
        current_longitude=77.60,
        current_latitude=12.98,
        current_address="MG Road",
        current_timestamp=now,
        destination_longitude=service_request.longitude,
        destination_latitude=service_request.latitude,
        destination_address="12 Residency Rd, Bangalore",
        status=TrackingStatus.EN_ROUTE,
        is_live=True,
        started_at=now,
        created_at=now,
        updated_at=now,
        points=[
            TrackingPoint(
                position=0, longitude=77.60, latitude=12.98, address="MG Road", recorded_at=now
            )
        ],
    )


# --- Create / List / Detail ---
@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "create_request", new_callable=AsyncMock)
async def test_create_service_request(
    mock_create: AsyncMock,
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_request(customer_id=mock_current_customer_user.id)
    mock_create.return_value = fake

    response = await async_client.post(
        "/api/services",
        json={
            "service_type": "plumber",
            "title": "Leaking kitchen tap",
            "description": "Tap drips constantly",
            "coordinates": [77.59, 12.97],
        },
    )

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Service request created successfully"
    assert body["data"]["id"] == str(fake.id)
    assert body["data"]["status"] == "pending"
    assert body["data"]["worker_id"] is None
    assert body["data"]["coordinates"] == [77.59, 12.97]
    user, payload = mock_create.call_args.args
    assert user == mock_current_customer_user
    assert payload.service_type == ServiceType.PLUMBER


@pytest.mark.asyncio
async def test_create_service_request_rejects_unknown_service_type(
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.post(
        "/api/services",
        json={"service_type": "astronaut", "title": "Moon", "description": "Fly"},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"].startswith("service_type:")


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "list_own_requests", new_callable=AsyncMock)
async def test_list_my_service_requests(
    mock_list: AsyncMock,
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fakes = [create_fake_request(customer_id=mock_current_customer_user.id) for _ in range(2)]
    mock_list.return_value = (fakes, 7)

    response = await async_client.get("/api/services?status=pending&skip=0&limit=2")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["total_count"] == 7
    assert data["has_next_page"] is True
    assert [item["id"] for item in data["items"]] == [str(fake.id) for fake in fakes]
    mock_list.assert_awaited_once_with(mock_current_customer_user, RequestStatus.PENDING, 0, 2)


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "nearby_requests", new_callable=AsyncMock)
async def test_nearby_requests_for_worker(
    mock_nearby: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    near, unset = create_fake_request(), create_fake_request(longitude=0.0, latitude=0.0)
    mock_nearby.return_value = [(near, 1.55), (unset, None)]

    response = await async_client.get(
        "/api/services/nearby/requests?latitude=12.98&longitude=77.60&radius=5"
    )

    assert response.status_code == status.HTTP_200_OK
    items = response.json()["data"]
    assert [item["distance_km"] for item in items] == [1.55, None]
    mock_nearby.assert_awaited_once_with(mock_current_worker_user, GeoPoint(77.60, 12.98), 5.0)


@pytest.mark.asyncio
async def test_nearby_requests_require_coordinates(
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.get("/api/services/nearby/requests?longitude=77.60")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "latitude" in response.json()["message"]


@pytest.mark.asyncio
async def test_nearby_requests_forbidden_for_customer(
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.get(
        "/api/services/nearby/requests?latitude=12.98&longitude=77.60"
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "get_request", new_callable=AsyncMock)
async def test_get_service_request(
    mock_get: AsyncMock,
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_request(customer_id=mock_current_customer_user.id)
    mock_get.return_value = fake

    response = await async_client.get(f"/api/services/{fake.id}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["title"] == fake.title
    mock_get.assert_awaited_once_with(mock_current_customer_user, fake.id)


# --- Transitions ---
@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "accept", new_callable=AsyncMock)
async def test_accept_service_request(
    mock_accept: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    worker_id = uuid4()
    fake = create_fake_request(status=RequestStatus.ACCEPTED, worker_id=worker_id)
    mock_accept.return_value = fake

    response = await async_client.put(f"/api/services/{fake.id}/accept")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["message"] == "Service request accepted"
    assert body["data"]["status"] == "accepted"
    assert body["data"]["worker_id"] == str(worker_id)


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "accept", new_callable=AsyncMock)
async def test_accept_taken_request_is_400(
    mock_accept: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_accept.side_effect = InvalidStateError("This service request is no longer available")

    response = await async_client.put(f"/api/services/{uuid4()}/accept")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {
        "success": False,
        "message": "This service request is no longer available",
    }


@pytest.mark.asyncio
async def test_customer_cannot_accept(
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.put(f"/api/services/{uuid4()}/accept")

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "reject_or_cancel", new_callable=AsyncMock)
async def test_customer_cancel_message(
    mock_reject: AsyncMock,
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_request(
        status=RequestStatus.CANCELLED, cancellation_reason="Cancelled by customer"
    )
    mock_reject.return_value = fake

    response = await async_client.put(f"/api/services/{fake.id}/reject")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Service request cancelled"
    mock_reject.assert_awaited_once_with(mock_current_customer_user, fake.id, None)


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "reject_or_cancel", new_callable=AsyncMock)
async def test_worker_reject_with_reason(
    mock_reject: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_request(status=RequestStatus.REJECTED, cancellation_reason="Too far")
    mock_reject.return_value = fake

    response = await async_client.put(f"/api/services/{fake.id}/reject", json={"reason": "Too far"})

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["message"] == "Service request rejected"
    assert body["data"]["cancellation_reason"] == "Too far"
    mock_reject.assert_awaited_once_with(mock_current_worker_user, fake.id, "Too far")


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "start", new_callable=AsyncMock)
async def test_start_returns_request_and_tracking(
    mock_start: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_request(status=RequestStatus.IN_PROGRESS, worker_id=uuid4())
    tracking = create_fake_tracking(fake)
    mock_start.return_value = (fake, tracking)

    response = await async_client.put(f"/api/services/{fake.id}/start")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["service_request"]["status"] == "in_progress"
    assert data["tracking"]["id"] == str(tracking.id)
    assert data["tracking"]["is_live"] is True
    assert data["tracking"]["status"] == "en_route"
    assert data["tracking"]["destination"]["coordinates"] == [77.59, 12.97]
    assert len(data["tracking"]["location_history"]) == 1


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "complete", new_callable=AsyncMock)
async def test_complete_with_actual_cost(
    mock_complete: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_request(
        status=RequestStatus.COMPLETED, estimated_cost=650.0, completed_at=datetime.now(timezone.utc)
    )
    mock_complete.return_value = fake

    response = await async_client.put(
        f"/api/services/{fake.id}/complete", json={"actual_cost": 650.0}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Service completed successfully"
    assert response.json()["data"]["estimated_cost"] == 650.0
    mock_complete.assert_awaited_once_with(mock_current_worker_user, fake.id, 650.0)


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "complete", new_callable=AsyncMock)
async def test_complete_without_body(
    mock_complete: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_request(status=RequestStatus.COMPLETED)
    mock_complete.return_value = fake

    response = await async_client.put(f"/api/services/{fake.id}/complete")

    assert response.status_code == status.HTTP_200_OK
    mock_complete.assert_awaited_once_with(mock_current_worker_user, fake.id, None)


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "rate", new_callable=AsyncMock)
async def test_rate_service_request(
    mock_rate: AsyncMock,
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_request(
        status=RequestStatus.COMPLETED, customer_rating=5, customer_review="Spotless work"
    )
    mock_rate.return_value = fake

    response = await async_client.put(
        f"/api/services/{fake.id}/rate", json={"rating": 5, "review": "Spotless work"}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Rating submitted successfully"
    assert response.json()["data"]["customer_rating"] == 5
    _, _, payload = mock_rate.call_args.args
    assert payload.review_type == ReviewType.CUSTOMER_TO_WORKER


@pytest.mark.asyncio
async def test_rating_out_of_range_is_rejected(
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.put(f"/api/services/{uuid4()}/rate", json={"rating": 6})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"].startswith("rating:")
