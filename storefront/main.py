# storefront/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from storefront.constants import APP_NAME
from storefront.core.config import get_settings
from storefront.core.errors import ApiError, api_error_handler
from storefront.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from storefront.models import storage as _storage_models  # noqa: F401


# Routers
from storefront.routers.auth import router as auth_router
from storefront.routers.products import router as products_router
from storefront.routers.vehicle import router as vehicle_router
from storefront.routers.cart import router as cart_router
from storefront.routers.favorites import router as favorites_router
from storefront.routers.checkout import router as checkout_router
from storefront.routers.orders import router as orders_router
from storefront.routers.admin import router as admin_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Create the client-state table.
      - Log which upstream API this storefront talks to.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("🔄 Startup: preparing client-state storage...")
    try:
        create_db_and_tables()
        logger.info("✅ Startup: client-state storage ready.")
    except Exception as e:
        logger.error(f"❌ Startup: client-state storage FAILED: {e}")
        raise
    logger.info(f"🔗 Upstream API: {settings.API_BASE_URL}")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME or APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Upstream API failures -> {"error", "message", "fields"}
app.add_exception_handler(ApiError, api_error_handler)

# Versioned API prefix, e.g. /api/v1
app.include_router(auth_router, prefix=settings.API_V1_STR)
app.include_router(products_router, prefix=settings.API_V1_STR)
app.include_router(vehicle_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(favorites_router, prefix=settings.API_V1_STR)
app.include_router(checkout_router, prefix=settings.API_V1_STR)
app.include_router(orders_router, prefix=settings.API_V1_STR)
app.include_router(admin_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "autoparts-storefront"}
