"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers, routers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from psycopg_pool import AsyncConnectionPool

from src.adapters.store.memory import InMemoryKeyValueStore
from src.adapters.store.postgres import PostgresKeyValueStore, run_migrations
from src.api import passthrough
from src.api.errors import register_exception_handlers
from src.api.routes import router as gate_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Opens the key-value store (PostgreSQL pool + migrations, or in-memory)
    - Creates shared HTTP clients for the verification API and the upstream
    - Closes everything on shutdown
    """
    settings = get_settings()

    logger.info("Starting gate...")

    pool: AsyncConnectionPool | None = None
    if settings.store_backend == "postgres":
        logger.info("Connecting to database...")
        pool = AsyncConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=False,
        )
        await pool.open()

        logger.info("Running database migrations...")
        await run_migrations(pool)

        store = PostgresKeyValueStore(pool)
        purged = await store.purge_expired()
        logger.info("Purged %d expired store entries", purged)
        app.state.store = store
    else:
        logger.warning("Using in-memory store; state is lost on restart")
        app.state.store = InMemoryKeyValueStore()

    app.state.api_http = httpx.AsyncClient(timeout=settings.api_timeout_seconds)
    app.state.upstream_http = httpx.AsyncClient(timeout=settings.api_timeout_seconds)

    logger.info("Gate startup complete")

    yield

    # Shutdown
    logger.info("Shutting down gate...")
    await app.state.api_http.aclose()
    await app.state.upstream_http.aclose()
    if pool is not None:
        await pool.close()
        logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="phrasegate",
        description="Passphrase + SMS one-time code gate in front of a private site",
        version="0.1.0",
        lifespan=lifespan,
        # Every path not listed in routes.py goes through the gate
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    register_exception_handlers(app)
    app.include_router(gate_router)

    @app.get("/__health", include_in_schema=False)
    async def health_check() -> dict[str, str]:
        """Liveness probe; does not touch the store or the network."""
        return {"status": "healthy"}

    # Catch-all last
    app.include_router(passthrough.router)
    return app


app = create_app()
