"""Shared fixtures: file-backed SQLite store, mocked Midtrans, ASGI client."""
from unittest.mock import AsyncMock

import httpx
import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app import models  # noqa: F401
from app.config import Settings
from app.core.dependencies import get_gateway, get_settings
from app.core.security import midtrans_signature
from app.database import Base, get_db
from app.main import app
from app.services.midtrans_client import CheckoutSession, MidtransClient
from app.services.order_service import OrderService
from app.services.order_store import OrderStore

SERVER_KEY = "SB-Mid-server-test-key"
ADMIN_PASSWORD = "print-operator"


def signed_notification(order_ref, transaction_status, fraud_status="accept", status_code="200", gross_amount="20000.00"):
    """Notification body as Midtrans would post it."""
    return {
        "order_id": order_ref,
        "status_code": status_code,
        "gross_amount": gross_amount,
        "signature_key": midtrans_signature(order_ref, status_code, gross_amount, SERVER_KEY),
        "transaction_status": transaction_status,
        "fraud_status": fraud_status,
    }


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        environment="test",
        secret_key="test-secret",
        admin_password=ADMIN_PASSWORD,
        midtrans_server_key=SERVER_KEY,
    )


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}")

    # Take the write lock when a transaction starts so concurrent sessions queue
    # on the busy timeout instead of failing to upgrade a shared lock.
    @event.listens_for(engine.sync_engine, "connect")
    def disable_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def gateway():
    mock_gateway = AsyncMock(spec=MidtransClient)
    mock_gateway.create_session.return_value = CheckoutSession(
        token="snap-token-1",
        redirect_url="https://app.sandbox.midtrans.com/snap/v4/redirection/snap-token-1",
    )
    return mock_gateway


@pytest.fixture
def store(db):
    return OrderStore(db)


@pytest.fixture
def service(store, gateway, test_settings):
    return OrderService(store, gateway, test_settings)


@pytest.fixture
async def client(session_factory, gateway, test_settings):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_gateway] = lambda: gateway

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def admin_headers(client):
    response = await client.post("/api/v1/admin/auth/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
