"""
tests/core/test_error_envelopes.py

Every failure leaves the API as {"success": false, "message": ...}:
- APIError subclasses keep their status and message
- Request validation collapses to 400 with the first field error
- Unknown routes and unhandled exceptions are wrapped too
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from main import app
from onehive.core.exceptions import ForbiddenError, NotFoundError
from onehive.core.schemas import CurrentUser
from onehive.lifecycle.coordinator import LifecycleCoordinator


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "get_request", new_callable=AsyncMock)
async def test_not_found_envelope(
    mock_get: AsyncMock,
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_get.side_effect = NotFoundError("Service request not found")

    response = await async_client.get(f"/api/services/{uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Service request not found"}


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "get_request", new_callable=AsyncMock)
async def test_forbidden_envelope(
    mock_get: AsyncMock,
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_get.side_effect = ForbiddenError("Not authorized to view this service request")

    response = await async_client.get(f"/api/services/{uuid4()}")

    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to view this service request"


@pytest.mark.asyncio
async def test_validation_error_is_400_with_field_message(
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.post(
        "/api/services",
        json={"service_type": "plumber", "description": "Tap drips"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"].startswith("title:")


@pytest.mark.asyncio
async def test_out_of_range_coordinates_are_rejected(
    mock_current_customer_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.post(
        "/api/services",
        json={
            "service_type": "plumber",
            "title": "Leak",
            "description": "Tap drips",
            "coordinates": [200, 12.97],
        },
    )

    assert response.status_code == 400
    assert "longitude must be between -180 and 180" in response.json()["message"]


@pytest.mark.asyncio
async def test_unknown_route_envelope(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found"}


@pytest.mark.asyncio
@patch.object(LifecycleCoordinator, "get_request", new_callable=AsyncMock)
async def test_unhandled_error_is_wrapped_as_500(
    mock_get: AsyncMock,
    mock_current_customer_user: CurrentUser,
    override_get_db: None,
) -> None:
    mock_get.side_effect = RuntimeError("boom")
    transport = ASGITransport(app=app, raise_app_exceptions=False)

    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get(f"/api/services/{uuid4()}")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "An unexpected error occurred"}


@pytest.mark.asyncio
async def test_security_headers_are_set(async_client: AsyncClient) -> None:
    response = await async_client.get("/")

    assert response.status_code == 200
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
