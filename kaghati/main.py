"""
Kaghati Admin - Main Application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .dependencies import init_dependencies, close_dependencies
from .routes import (
    auth_router,
    customers_router,
    notifications_router,
    orders_router,
    pincodes_router,
    products_router,
    shipping_router,
    staff_router,
    stores_router,
    sync_router,
)
from .shopify import ShopifyClientError, ShopifyUserError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting Kaghati Admin...")
    await init_dependencies()
    logger.info("Application ready")
    yield
    logger.info("Shutting down...")
    await close_dependencies()


app = FastAPI(
    title="Kaghati Admin",
    description="Multi-store order, catalog and delivery administration for a Shopify shop",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(auth_router)
app.include_router(stores_router)
app.include_router(pincodes_router)
app.include_router(staff_router)
app.include_router(orders_router)
app.include_router(products_router)
app.include_router(customers_router)
app.include_router(shipping_router)
app.include_router(notifications_router)
app.include_router(sync_router)


@app.exception_handler(ShopifyUserError)
async def shopify_user_error_handler(request: Request, exc: ShopifyUserError):
    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})


@app.exception_handler(ShopifyClientError)
async def shopify_error_handler(request: Request, exc: ShopifyClientError):
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.get("/health")
async def health():
    """Health check endpoint (no auth required)."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "kaghati.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
