import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENV_MODE"] = "development"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["MOCK_FAILURE_RATE"] = "0"
os.environ["MOCK_LATENCY_SECONDS"] = "0"

from decimal import Decimal
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from caffio.database import Base, get_db
from caffio.main import app
from caffio.models import Cafe, Menu, MenuItem
from caffio.services.geo import MockGeoService, get_geo_service
from caffio.services.payment import MockPaymentService, get_payment_service


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def payment_service():
    return MockPaymentService()


@pytest.fixture
def geo_service():
    return MockGeoService()


@pytest.fixture
async def client(session_maker, payment_service, geo_service):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    app.dependency_overrides[get_geo_service] = lambda: geo_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def cafe_with_menu(session_maker):
    """One cafe, one menu, Flat White at 5.30 and Banana Bread at 6.80."""
    async with session_maker() as db:
        cafe = Cafe(
            name="Reservoir Roasters",
            address="Reservoir St, Surry Hills NSW 2010",
            lat=-33.8825,
            lon=151.2094,
        )
        menu = Menu(cafe=cafe, name="Main")
        flat_white = MenuItem(menu=menu, name="Flat White", price=Decimal("5.30"), currency="AUD")
        banana_bread = MenuItem(menu=menu, name="Banana Bread", price=Decimal("6.80"), currency="AUD")
        db.add_all([cafe, menu, flat_white, banana_bread])
        await db.commit()

        return SimpleNamespace(
            cafe_id=cafe.id,
            menu_id=menu.id,
            flat_white_id=flat_white.id,
            banana_bread_id=banana_bread.id,
        )


@pytest.fixture
async def customer(client):
    response = await client.post(
        "/customers/signup",
        json={"name": "Alex", "email": "alex@example.com", "password": "secret"},
    )
    assert response.status_code == 201
    return response.json()
