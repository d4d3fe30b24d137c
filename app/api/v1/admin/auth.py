"""Operator authentication."""
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from app.config import Settings
from app.core.dependencies import get_settings
from app.core.security import create_access_token, verify_admin_password

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    password: str


class LoginResponse(BaseModel):
    ok: bool
    access_token: str
    token_type: str = "bearer"


@router.post("/auth/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    app_settings: Settings = Depends(get_settings),
):
    """Exchange the operator password for a bearer token."""
    if not verify_admin_password(request.password, app_settings.admin_password):
        logger.warning("Failed operator login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="unauthorized",
        )

    access_token = create_access_token(
        data={"role": "admin"},
        secret_key=app_settings.secret_key,
        expires_delta=timedelta(hours=app_settings.admin_token_ttl_hours),
    )
    return LoginResponse(ok=True, access_token=access_token)
