import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.core.logging import setup_logging

setup_logging()

from storefront.api.errors import register_exception_handlers
from storefront.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from storefront.api.routes import cart, health, products, stock
from storefront.api.routes.admin import inventory as admin_inventory
from storefront.core.config import settings
from storefront.core.database import create_engine, create_session_factory
from storefront.services.cart_service import cleanup_stale_items

logger = logging.getLogger(__name__)

try:
    settings.validate_secrets()
except ValueError as e:
    logger.critical("Secret validation failed: %s", e)
    raise SystemExit(f"FATAL: {e}") from e


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    engine = create_engine(settings)
    app.state.session_factory = create_session_factory(engine)
    logger.info("Database pool opened for %s:%s", settings.db_host, settings.db_port)
    try:
        async with app.state.session_factory() as db:
            try:
                await cleanup_stale_items(db)
                await db.commit()
            except Exception:
                await db.rollback()
                logger.exception("Failed to release stale cart reservations")
        yield
    finally:
        await engine.dispose()
        logger.info("Database pool closed")


app = FastAPI(
    title="Storefront API",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER],
)
app.add_middleware(RequestIdMiddleware)

# Public routes
app.include_router(health.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(cart.router, prefix="/api")
app.include_router(stock.router, prefix="/api")

# Admin routes
app.include_router(admin_inventory.router, prefix="/api/admin")
