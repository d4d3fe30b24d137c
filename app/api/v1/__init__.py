"""API v1 routers."""
from fastapi import APIRouter

from app.api.v1 import admin, payments, print_orders

router = APIRouter()

router.include_router(print_orders.router, prefix="/print-orders", tags=["print-orders"])
router.include_router(payments.router, prefix="/payments", tags=["payments"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
