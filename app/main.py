"""Application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import router as api_v1_router
from app.config import settings
from app.database import engine

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle."""
    if not settings.midtrans_server_key:
        logger.warning("MIDTRANS_SERVER_KEY not configured: checkouts will fail and webhooks will not verify")
    if not settings.admin_password:
        logger.warning("ADMIN_PASSWORD not configured: operator login disabled")
    logger.info(f"Midtrans mode: {'production' if settings.midtrans_is_production else 'sandbox'}")

    yield

    await engine.dispose()


app = FastAPI(
    title="Photo Print Kiosk API",
    description="Print orders, Midtrans payments and operator hand-off",
    version="1.0.0",
    lifespan=lifespan,
)

if settings.is_development:
    cors_origins = ["*"]
    # allow_credentials cannot be combined with a wildcard origin
    allow_creds = False
else:
    cors_origins = list(set(settings.cors_origins))
    allow_creds = True

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_creds,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {
        "message": "Photo Print Kiosk API",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}
