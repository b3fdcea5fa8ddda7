"""
tests/conftest.py

Test fixtures for API integration and service-level tests.
Includes async clients, fake principals, dependency overrides and an
in-memory SQLite database built from the ORM metadata.
"""
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# --- Imports ---
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from onehive.core.dependencies import get_current_user
from onehive.core.limiter import limiter
from onehive.core.notifications import Notifier
from onehive.core.schemas import CurrentUser
from onehive.database.enums import RequestStatus, ServiceType, UserRole
from onehive.database.models import Base
from onehive.database.session import get_db
from onehive.service_request.models import ServiceRequest
from onehive.worker.models import Worker

limiter.enabled = False

BANGALORE = (77.59, 12.97)


# --- Core Test Fixtures ---


@pytest.fixture(scope="session")
def transport() -> ASGITransport:
    """Fixture for ASGI transport."""
    return ASGITransport(app=app)


@pytest_asyncio.fixture(scope="function")
async def async_client(transport: ASGITransport) -> AsyncGenerator[AsyncClient, None]:
    """Fixture for HTTP async client."""
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(autouse=True)
def clear_dependency_overrides() -> Generator[None, None, None]:
    yield
    app.dependency_overrides.clear()


# --- Fake Principal Fixtures ---


@pytest.fixture
def fake_customer_user() -> CurrentUser:
    return CurrentUser(id=uuid4(), role=UserRole.CUSTOMER, email="customer.test@onehive.com")


@pytest.fixture
def fake_worker_user() -> CurrentUser:
    return CurrentUser(id=uuid4(), role=UserRole.WORKER, email="worker.test@onehive.com")


@pytest.fixture
def fake_admin_user() -> CurrentUser:
    return CurrentUser(id=uuid4(), role=UserRole.ADMIN, email="admin.test@onehive.com")


# --- Dependency Override Fixtures ---


@pytest_asyncio.fixture
async def override_get_db() -> AsyncGenerator[None, None]:
    """Override for the database dependency."""

    async def _override() -> AsyncGenerator[AsyncMock, None]:
        yield AsyncMock()

    app.dependency_overrides[get_db] = _override
    yield
    app.dependency_overrides.pop(get_db, None)


def _as_current_user(user: CurrentUser) -> Callable[[], Awaitable[CurrentUser]]:
    async def _override() -> CurrentUser:
        return user

    return _override


@pytest.fixture
def mock_current_customer_user(fake_customer_user: CurrentUser) -> CurrentUser:
    app.dependency_overrides[get_current_user] = _as_current_user(fake_customer_user)
    return fake_customer_user


@pytest.fixture
def mock_current_worker_user(fake_worker_user: CurrentUser) -> CurrentUser:
    app.dependency_overrides[get_current_user] = _as_current_user(fake_worker_user)
    return fake_worker_user


@pytest.fixture
def mock_current_admin_user(fake_admin_user: CurrentUser) -> CurrentUser:
    app.dependency_overrides[get_current_user] = _as_current_user(fake_admin_user)
    return fake_admin_user


# --- In-memory Database Fixtures ---


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh SQLite schema per test, created from the ORM metadata."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def silent_notifier() -> AsyncMock:
    """Notifier double; lets tests assert which lifecycle emails were attempted."""
    return AsyncMock(spec=Notifier)


@pytest.fixture
def worker_factory(db_session: AsyncSession) -> Callable[..., Awaitable[Worker]]:
    async def _create(
        user_id: UUID | None = None,
        profession: ServiceType = ServiceType.PLUMBER,
        coordinates: tuple[float, float] = (77.60, 12.98),
        service_area: float = 10.0,
        is_verified: bool = True,
        is_available: bool = True,
        **overrides: Any,
    ) -> Worker:
        worker = Worker(
            user_id=user_id or uuid4(),
            contact_email=overrides.pop("contact_email", "worker.test@onehive.com"),
            profession=profession,
            longitude=coordinates[0],
            latitude=coordinates[1],
            service_area=service_area,
            is_verified=is_verified,
            is_available=is_available,
            **overrides,
        )
        db_session.add(worker)
        await db_session.commit()
        return worker

    return _create


@pytest.fixture
def request_factory(db_session: AsyncSession) -> Callable[..., Awaitable[ServiceRequest]]:
    async def _create(
        customer_id: UUID | None = None,
        service_type: ServiceType = ServiceType.PLUMBER,
        coordinates: tuple[float, float] = BANGALORE,
        status: RequestStatus = RequestStatus.PENDING,
        **overrides: Any,
    ) -> ServiceRequest:
        service_request = ServiceRequest(
            customer_id=customer_id or uuid4(),
            customer_email=overrides.pop("customer_email", "customer.test@onehive.com"),
            service_type=service_type,
            title=overrides.pop("title", "Leaking kitchen tap"),
            description=overrides.pop("description", "Tap drips constantly"),
            longitude=coordinates[0],
            latitude=coordinates[1],
            status=status,
            **overrides,
        )
        db_session.add(service_request)
        await db_session.commit()
        return service_request

    return _create