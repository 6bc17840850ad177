import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("DB_DSN", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402

import bcrypt  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from tourbook.infrastructure.database import get_session  # noqa: E402
from tourbook.main import app  # noqa: E402
from tourbook.models import Base, Tour, TourDate, User  # noqa: E402
from tourbook.roles import Role  # noqa: E402
from tourbook.security import mint_tokens  # noqa: E402
from tourbook.services.capacity_ledger import CapacityLedger  # noqa: E402


@pytest.fixture
async def engine(tmp_path):
    """A fresh SQLite file per test; a file lets several sessions contend for locks"""
    eng = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'tourbook.db'}",
        connect_args={"timeout": 30},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as s:
        yield s


@pytest.fixture
async def customer(session) -> User:
    user = User(
        name="Carla Customer",
        email="carla@example.com",
        password_hash=bcrypt.hashpw(b"secret123", bcrypt.gensalt()).decode(),
        role=Role.customer.value,
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def admin(session) -> User:
    user = User(
        name="Ada Admin",
        email="ada@example.com",
        password_hash=bcrypt.hashpw(b"secret123", bcrypt.gensalt()).decode(),
        role=Role.admin.value,
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def tour(session) -> Tour:
    tour = Tour(
        title="Dolomites Day Hike",
        slug="dolomites-day-hike",
        description="A full day on the Tre Cime circuit.",
        price_adult=Decimal("50.00"),
        price_child=Decimal("20.00"),
        language="en",
        itinerary="Meet at Rifugio Auronzo, loop around the peaks.",
        duration_value=8,
        duration_unit="hours",
        cover_image="images/cover.jpg",
    )
    session.add(tour)
    await session.commit()
    return tour


@pytest.fixture
def make_tour_date(session, tour):
    async def _make(capacity_max: int = 10, **kwargs) -> TourDate:
        tour_date = TourDate(
            tour_id=tour.id,
            date_start=kwargs.pop("date_start", datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(days=7)),
            capacity_min=1,
            capacity_max=capacity_max,
            seats_booked=0,
            **kwargs,
        )
        session.add(tour_date)
        await session.commit()
        return tour_date
    return _make


@pytest.fixture
async def tour_date(make_tour_date) -> TourDate:
    return await make_tour_date(capacity_max=10)


@pytest.fixture
def fill(session, customer):
    """Reserve *adults* seats on a date and commit, to set up a booked count"""
    async def _fill(tour_date_id: str, adults: int):
        booking = await CapacityLedger(session).reserve(tour_date_id, adults, 0, user_id=customer.id)
        await session.commit()
        return booking
    return _fill


@pytest.fixture
def headers():
    """Bearer header for a user"""
    def _headers(user: User) -> dict:
        access, _ = mint_tokens(sub=user.id, role=user.role)
        return {"Authorization": f"Bearer {access}"}
    return _headers


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def _get_session():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = _get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
