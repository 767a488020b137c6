import os
import uuid
from decimal import Decimal

# Never point the test run at a real database
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
from fastapi import HTTPException, Request, status
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from core.auth import current_active_user
from db.database import (
    Base,
    Barber,
    InventoryItem,
    PaymentMethod,
    Service,
    User,
    get_async_session,
)
from main import app

TEST_USER_HEADER = "X-Test-User"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


async def _persist(db, obj):
    # Detached copies survive rollbacks in the test session
    db.add(obj)
    await db.commit()
    db.expunge(obj)
    return obj


async def _make_user(db, role: str, email: str) -> User:
    user = User(
        id=uuid.uuid4(),
        email=email,
        hashed_password="not-a-real-hash",
        is_active=True,
        is_superuser=False,
        is_verified=True,
        name=email.split("@")[0],
        role=role,
    )
    return await _persist(db, user)


@pytest.fixture
async def admin(db):
    return await _make_user(db, "admin", "admin@barbearia.test")


@pytest.fixture
async def operator(db):
    return await _make_user(db, "operator", "caixa@barbearia.test")


@pytest.fixture
async def barber(db):
    return await _persist(db, Barber(name="João", active=True))


@pytest.fixture
async def payment_method(db):
    return await _persist(db, PaymentMethod(name="PIX", active=True))


@pytest.fixture
async def service(db):
    return await _persist(db, Service(name="Corte", price=Decimal("40.00"), duration_minutes=30, active=True))


@pytest.fixture
def make_item(db):
    async def _make(name="Pomada", quantity="10", min_quantity="0", sku=None):
        it = InventoryItem(
            name=name,
            sku=sku,
            quantity=Decimal(quantity),
            unit="un",
            min_quantity=Decimal(min_quantity) if min_quantity is not None else None,
        )
        return await _persist(db, it)

    return _make


@pytest.fixture
async def app_overrides(session_maker, admin, operator):
    users = {str(admin.id): admin, str(operator.id): operator}

    async def _session():
        async with session_maker() as session:
            yield session

    async def _current_user(request: Request):
        user = users.get(request.headers.get(TEST_USER_HEADER, ""))
        if user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        return user

    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[current_active_user] = _current_user
    yield
    app.dependency_overrides.clear()


def _client(user=None) -> AsyncClient:
    headers = {TEST_USER_HEADER: str(user.id)} if user is not None else {}
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", headers=headers)


@pytest.fixture
async def admin_client(app_overrides, admin):
    async with _client(admin) as c:
        yield c


@pytest.fixture
async def operator_client(app_overrides, operator):
    async with _client(operator) as c:
        yield c


@pytest.fixture
async def anon_client(app_overrides):
    async with _client() as c:
        yield c
