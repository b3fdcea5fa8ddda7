"""
tests/worker/test_worker_routes.py

Unit tests for worker/routes.py covering:
- Registration and own profile / location
- Public nearby, search, tracking-code and profile lookups
- Worker request views
- Admin listing, verification and application status
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from uuid import UUID, uuid4

import pytest
from fastapi import status
from httpx import AsyncClient

from onehive.core.exceptions import InvalidStateError, NotFoundError
from onehive.core.geo import GeoPoint
from onehive.core.schemas import CurrentUser
from onehive.database.enums import (
    ApplicationStatus,
    RequestStatus,
    ServiceType,
    VerificationStatus,
)
from onehive.lifecycle.coordinator import LifecycleCoordinator
from onehive.service_request.models import ServiceRequest
from onehive.worker.models import Worker
from onehive.worker.services import WorkerDirectory, default_availability


def create_fake_worker(user_id: UUID | None = None, **overrides) -> Worker:
    now = datetime.now(timezone.utc)
    values = dict(
        id=uuid4(),
        user_id=user_id or uuid4(),
        profession=ServiceType.PLUMBER,
        skills=["pipe fitting", "leak repair"],
        experience=5,
        description="Residential plumbing",
        hourly_rate=350.0,
        profile_image="",
        is_verified=True,
        verification_status=VerificationStatus.VERIFIED,
        application_status=ApplicationStatus.APPROVED,
        tracking_code="OH-PART-2026-0001",
        longitude=77.60,
        latitude=12.98,
        address="MG Road",
        city="Bangalore",
        state="Karnataka",
        pincode="560001",
        service_area=10.0,
        availability=default_availability(),
        is_available=True,
        rating_average=4.5,
        rating_count=12,
        completed_jobs=30,
        created_at=now - timedelta(days=30),
        updated_at=now,
    )
    values.update(overrides)
    return Worker(**values)


def create_fake_request(**overrides) -> ServiceRequest:
    now = datetime.now(timezone.utc)
    values = dict(
        id=uuid4(),
        customer_id=uuid4(),
        service_type=ServiceType.PLUMBER,
        title="Blocked drain",
        description="Bathroom drain is blocked",
        street="",
        city="Bangalore",
        state="",
        pincode="",
        longitude=77.59,
        latitude=12.97,
        estimated_duration=1.0,
        estimated_cost=0.0,
        images=[],
        status=RequestStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    values.update(overrides)
    return ServiceRequest(**values)


# --- Admin Listing ---
@pytest.mark.asyncio
@patch.object(WorkerDirectory, "list_all", new_callable=AsyncMock)
async def test_list_workers_admin(
    mock_list: AsyncMock,
    mock_current_admin_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_list.return_value = ([create_fake_worker() for _ in range(2)], 2)

    response = await async_client.get("/api/workers")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["total_count"] == 2
    assert data["has_next_page"] is False
    mock_list.assert_awaited_once_with(0, 10)


@pytest.mark.asyncio
async def test_list_workers_forbidden_for_customer(
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.get("/api/workers")

    assert response.status_code == status.HTTP_403_FORBIDDEN


# --- Registration & Profile ---
@pytest.mark.asyncio
@patch.object(WorkerDirectory, "register", new_callable=AsyncMock)
async def test_register_worker(
    mock_register: AsyncMock,
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_worker(
        user_id=mock_current_customer_user.id,
        is_verified=False,
        verification_status=VerificationStatus.PENDING,
        application_status=ApplicationStatus.PENDING,
    )
    mock_register.return_value = fake

    response = await async_client.post(
        "/api/workers/register",
        json={"profession": "plumber", "coordinates": [77.60, 12.98], "hourly_rate": 350},
    )

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["message"] == "Worker registration successful"
    assert body["data"]["tracking_code"] == "OH-PART-2026-0001"
    assert body["data"]["is_verified"] is False
    assert body["data"]["availability"]["sunday"]["available"] is False


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "register", new_callable=AsyncMock)
async def test_register_worker_twice(
    mock_register: AsyncMock,
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_register.side_effect = InvalidStateError("You are already registered as a worker")

    response = await async_client.post("/api/workers/register", json={"profession": "plumber"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "You are already registered as a worker"


@pytest.mark.asyncio
async def test_register_worker_rejects_bad_availability(
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.post(
        "/api/workers/register",
        json={"profession": "plumber", "availability": {"funday": {"start": "09:00"}}},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "get_by_user_or_404", new_callable=AsyncMock)
async def test_get_my_profile(
    mock_get: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_worker(user_id=mock_current_worker_user.id)
    mock_get.return_value = fake

    response = await async_client.get("/api/workers/profile")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["coordinates"] == [77.60, 12.98]
    mock_get.assert_awaited_once_with(mock_current_worker_user.id)


@pytest.mark.asyncio
async def test_get_my_profile_forbidden_for_customer(
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.get("/api/workers/profile")

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "update_profile", new_callable=AsyncMock)
async def test_update_my_profile(
    mock_update: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_update.return_value = create_fake_worker(hourly_rate=420.0, is_available=False)

    response = await async_client.put(
        "/api/workers/profile", json={"hourly_rate": 420, "is_available": False}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Profile updated successfully"
    _, payload = mock_update.call_args.args
    assert payload.model_dump(exclude_unset=True) == {"hourly_rate": 420.0, "is_available": False}


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "update_location", new_callable=AsyncMock)
async def test_update_my_location(
    mock_update: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_update.return_value = create_fake_worker(longitude=77.64, latitude=12.97)

    response = await async_client.put(
        "/api/workers/location", json={"coordinates": [77.64, 12.97], "address": "Indiranagar"}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["coordinates"] == [77.64, 12.97]


@pytest.mark.asyncio
async def test_update_my_location_rejects_bad_latitude(
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.put("/api/workers/location", json={"coordinates": [77.64, 95]})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "latitude must be between -90 and 90" in response.json()["message"]


# --- Public Discovery ---
@pytest.mark.asyncio
@patch.object(WorkerDirectory, "find_nearby", new_callable=AsyncMock)
async def test_nearby_workers_is_public(
    mock_nearby: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    near = create_fake_worker()
    mock_nearby.return_value = [(near, 1.55)]

    response = await async_client.get(
        "/api/workers/nearby?latitude=12.97&longitude=77.59&profession=plumber"
    )

    assert response.status_code == status.HTTP_200_OK
    items = response.json()["data"]
    assert items[0]["id"] == str(near.id)
    assert items[0]["distance_km"] == 1.55
    mock_nearby.assert_awaited_once_with(GeoPoint(77.59, 12.97), 10.0, ServiceType.PLUMBER)


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "search", new_callable=AsyncMock)
async def test_search_workers(
    mock_search: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_search.return_value = ([create_fake_worker()], 1)

    response = await async_client.get(
        "/api/workers/search?profession=plumber&city=Bangalore&min_rating=4&max_hourly_rate=500"
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["total_count"] == 1
    mock_search.assert_awaited_once_with(
        profession=ServiceType.PLUMBER,
        city="Bangalore",
        min_rating=4.0,
        max_hourly_rate=500.0,
        skip=0,
        limit=10,
    )


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "get_by_tracking_code", new_callable=AsyncMock)
async def test_track_application(
    mock_track: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_track.return_value = create_fake_worker(application_status=ApplicationStatus.PENDING)

    response = await async_client.get("/api/workers/track/OH-PART-2026-0001")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data == {
        "tracking_code": "OH-PART-2026-0001",
        "profession": "plumber",
        "application_status": "pending",
        "verification_status": "verified",
        "created_at": data["created_at"],
    }


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "get_by_tracking_code", new_callable=AsyncMock)
async def test_track_unknown_application(
    mock_track: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_track.side_effect = NotFoundError("Invalid tracking code")

    response = await async_client.get("/api/workers/track/NOPE")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"success": False, "message": "Invalid tracking code"}


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "get_or_404", new_callable=AsyncMock)
async def test_public_worker_profile(
    mock_get: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_worker()
    mock_get.return_value = fake

    response = await async_client.get(f"/api/workers/{fake.id}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["rating_average"] == 4.5
    mock_get.assert_awaited_once_with(fake.id)


# --- Worker Request Views ---
@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "list_assigned_requests", new_callable=AsyncMock)
async def test_my_assigned_requests(
    mock_list: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_list.return_value = ([create_fake_request(status=RequestStatus.ACCEPTED)], 1)

    response = await async_client.get("/api/workers/my/requests?status=accepted")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["items"][0]["status"] == "accepted"
    mock_list.assert_awaited_once_with(mock_current_worker_user, RequestStatus.ACCEPTED, 0, 10)


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "available_requests", new_callable=AsyncMock)
async def test_available_requests(
    mock_available: AsyncMock,
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_request()
    mock_available.return_value = [(fake, 1.55)]

    response = await async_client.get("/api/workers/available/requests")

    assert response.status_code == status.HTTP_200_OK
    items = response.json()["data"]
    assert items[0]["id"] == str(fake.id)
    assert items[0]["distance_km"] == 1.55
    mock_available.assert_awaited_once_with(mock_current_worker_user.id)


# --- Admin Updates ---
@pytest.mark.asyncio
@patch.object(WorkerDirectory, "verify", new_callable=AsyncMock)
async def test_verify_worker(
    mock_verify: AsyncMock,
    mock_current_admin_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_worker()
    mock_verify.return_value = fake

    response = await async_client.put(f"/api/workers/verify/{fake.id}", json={"is_verified": True})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Worker verification updated"
    worker_id, payload = mock_verify.call_args.args
    assert worker_id == fake.id
    assert payload.is_verified is True


@pytest.mark.asyncio
async def test_verify_worker_forbidden_for_worker(
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.put(f"/api/workers/verify/{uuid4()}", json={"is_verified": True})

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "set_application_status", new_callable=AsyncMock)
async def test_set_application_status(
    mock_status: AsyncMock,
    mock_current_admin_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake = create_fake_worker(application_status=ApplicationStatus.REJECTED)
    mock_status.return_value = fake

    response = await async_client.put(
        f"/api/workers/status/{fake.id}", json={"application_status": "rejected"}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["application_status"] == "rejected"


@pytest.mark.asyncio
async def test_set_application_status_rejects_unknown_value(
    mock_current_admin_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.put(
        f"/api/workers/status/{uuid4()}", json={"application_status": "maybe"}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "delete", new_callable=AsyncMock)
async def test_delete_worker(
    mock_delete: AsyncMock,
    mock_current_admin_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    worker_id = uuid4()

    response = await async_client.delete(f"/api/workers/{worker_id}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Worker deleted successfully"
    mock_delete.assert_awaited_once_with(worker_id)


@pytest.mark.asyncio
@patch.object(WorkerDirectory, "delete", new_callable=AsyncMock)
async def test_delete_worker_with_history_is_refused(
    mock_delete: AsyncMock,
    mock_current_admin_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_delete.side_effect = InvalidStateError("Worker has service history and cannot be deleted")

    response = await async_client.delete(f"/api/workers/{uuid4()}")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {
        "success": False,
        "message": "Worker has service history and cannot be deleted",
    }


@pytest.mark.asyncio
async def test_delete_worker_forbidden_for_worker(
    mock_current_worker_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.delete(f"/api/workers/{uuid4()}")

    assert response.status_code == status.HTTP_403_FORBIDDEN
