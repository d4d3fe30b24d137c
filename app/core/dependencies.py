"""FastAPI dependencies."""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings
from app.core.security import SignatureVerifier, decode_access_token
from app.database import get_db
from app.services.midtrans_client import MidtransClient
from app.services.order_service import OrderService
from app.services.order_store import OrderStore
from app.services.query_service import OrderQueryService

security = HTTPBearer()


def get_settings() -> Settings:
    return settings


def get_order_store(db: AsyncSession = Depends(get_db)) -> OrderStore:
    return OrderStore(db)


def get_gateway(app_settings: Settings = Depends(get_settings)) -> MidtransClient:
    return MidtransClient(app_settings)


def get_signature_verifier(app_settings: Settings = Depends(get_settings)) -> SignatureVerifier:
    return SignatureVerifier(app_settings.midtrans_server_key)


def get_order_service(
    store: OrderStore = Depends(get_order_store),
    gateway: MidtransClient = Depends(get_gateway),
    app_settings: Settings = Depends(get_settings),
) -> OrderService:
    return OrderService(store, gateway, app_settings)


def get_query_service(store: OrderStore = Depends(get_order_store)) -> OrderQueryService:
    return OrderQueryService(store)


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    app_settings: Settings = Depends(get_settings),
) -> dict:
    """
    Check the operator token.

    Used by every admin route except login.
    """
    payload = decode_access_token(credentials.credentials, app_settings.secret_key)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )

    return payload
