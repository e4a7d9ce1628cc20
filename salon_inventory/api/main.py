"""
FastAPI application for the salon inventory service.

Startup migrates the SQLite schema and opens the connection pool; shutdown
closes it again.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from salon_inventory.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from salon_inventory.api.middleware.error_handler import setup_exception_handlers
from salon_inventory.api.routes import (
    batches_router,
    health_router,
    purchase_orders_router,
    stocks_router,
)
from salon_inventory.config import configure_logging, get_logger, get_settings
from salon_inventory.infrastructure.storage.sqlite import close_pool, get_pool
from salon_inventory.infrastructure.storage.sqlite.migrations import run_migrations

logger = get_logger(__name__)

API_TITLE = "Salon Inventory API"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging()
    logger.info(
        "inventory_api_starting",
        db_path=str(settings.storage.db_path),
        environment=settings.environment,
    )

    results = await run_migrations()
    failed = [r.version for r in results if not r.success]
    if failed:
        raise RuntimeError(f"Schema migrations failed: {', '.join(failed)}")
    await get_pool()
    logger.info("inventory_api_ready", migrations_applied=len(results))

    try:
        yield
    finally:
        await close_pool()
        logger.info("inventory_api_stopped")


def create_app() -> FastAPI:
    """Build the app: middleware, error handlers and the inventory routers."""
    settings = get_settings()

    app = FastAPI(
        title=API_TITLE,
        description="Branch stock ledger, product batches and FIFO stock-out",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    for router in (health_router, stocks_router, batches_router, purchase_orders_router):
        app.include_router(router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {"name": API_TITLE, "version": settings.app_version, "docs": "/docs"}

    # Probe path for container orchestrators
    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    api = get_settings().api
    uvicorn.run("salon_inventory.api.main:app", host=api.host, port=api.port, reload=api.debug)
