"""Pytest configuration and fixtures."""

from decimal import Decimal
from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from lavajato.main import app
from lavajato.models import Base, Service, Unit, User, Vehicle
from lavajato.models.vehicle import VehicleSize
from lavajato.services.booking_service import BookingService
from lavajato.services.database import enable_sqlite_foreign_keys, get_db
from lavajato.services.notification_service import CompletionNotifier
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool


class RecordingNotifier(CompletionNotifier):
    """Remembers every appointment it was asked to notify about."""

    def __init__(self):
        self.calls: List[str] = []

    async def notify_completion(self, appointment_id: str) -> bool:
        self.calls.append(appointment_id)
        return True


class FailingNotifier(CompletionNotifier):
    """Breaks the notifier contract by raising."""

    def __init__(self):
        self.calls: List[str] = []

    async def notify_completion(self, appointment_id: str) -> bool:
        self.calls.append(appointment_id)
        raise RuntimeError("provider exploded")


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a throwaway SQLite database per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool, echo=False
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> FailingNotifier:
    return FailingNotifier()


@pytest.fixture
def booking(notifier) -> BookingService:
    return BookingService(notifier=notifier, pickup_fee=Decimal("15.00"))


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession, booking: BookingService
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client.

    ASGITransport does not run the lifespan, so the booking service is
    installed on app.state here.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.state.booking_service = booking

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    await booking.wait_for_notifications(timeout=5)
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    user = User(
        name="Maria Silva",
        phone_number="+55 (11) 98765-4321",
        address="Rua das Flores, 123",
        neighborhood="Centro",
        city="São Paulo",
        state="SP",
        postal_code="01000-000",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


async def _make_vehicle(db_session: AsyncSession, user: User, plate: str, size: VehicleSize):
    vehicle = Vehicle(user_id=user.id, model="Onix", license_plate=plate, size=size)
    db_session.add(vehicle)
    await db_session.commit()
    await db_session.refresh(vehicle)
    return vehicle


@pytest_asyncio.fixture
async def small_vehicle(db_session: AsyncSession, test_user: User) -> Vehicle:
    return await _make_vehicle(db_session, test_user, "ABC1D23", VehicleSize.SMALL)


@pytest_asyncio.fixture
async def medium_vehicle(db_session: AsyncSession, test_user: User) -> Vehicle:
    return await _make_vehicle(db_session, test_user, "DEF4G56", VehicleSize.MEDIUM)


@pytest_asyncio.fixture
async def large_vehicle(db_session: AsyncSession, test_user: User) -> Vehicle:
    return await _make_vehicle(db_session, test_user, "HIJ7K89", VehicleSize.LARGE)


@pytest_asyncio.fixture
async def test_unit(db_session: AsyncSession) -> Unit:
    unit = Unit(name="Unidade Centro", address="Av. Paulista, 1000")
    db_session.add(unit)
    await db_session.commit()
    await db_session.refresh(unit)
    return unit


@pytest_asyncio.fixture
async def basic_wash(db_session: AsyncSession) -> Service:
    """Lavagem simples: 25.00 + 5.00 surcharge."""
    service = Service(name="Lavagem Simples", base_price=Decimal("25.00"), size_surcharge=Decimal("5.00"))
    db_session.add(service)
    await db_session.commit()
    await db_session.refresh(service)
    return service


@pytest_asyncio.fixture
async def wax(db_session: AsyncSession) -> Service:
    """Enceramento: 45.00 + 8.00 surcharge."""
    service = Service(name="Enceramento", base_price=Decimal("45.00"), size_surcharge=Decimal("8.00"))
    db_session.add(service)
    await db_session.commit()
    await db_session.refresh(service)
    return service
