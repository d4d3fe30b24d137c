"""Admin API."""
from fastapi import APIRouter
from app.api.v1.admin import auth, orders

router = APIRouter()
router.include_router(auth.router)
router.include_router(orders.router)
