"""Apiary application factory.

``create_app()`` builds the FastAPI app and the two process-wide collaborators
every request shares:

- the async engine + session factory (``app.state.session_factory``)
- the bearer-token verifier (``app.state.identity_verifier``)

Both are constructed once here from an explicit ``Settings`` instance and are
never mutated afterwards.  The lifespan optionally creates the schema (dev and
test databases) and disposes the engine on shutdown.

Entry point:
    uvicorn apiary.server.main:create_app --factory --host 0.0.0.0 --port 8080

Or via the CLI:
    apiary serve
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from apiary import __version__
from apiary.api.errors import register_exception_handlers
from apiary.api.router import api_router
from apiary.config import Settings, get_settings
from apiary.db.session import build_session_factory, create_schema
from apiary.identity import IdentityVerifier

logger = logging.getLogger(__name__)


def custom_generate_unique_id(route: APIRoute) -> str:
    """Generate deterministic, SDK-friendly operation IDs for REST routes."""
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the Apiary ASGI application.

    Args:
        settings: Configuration to use; defaults to the environment settings.

    Returns:
        A FastAPI app with all routes and error handlers registered.
    """
    settings = settings or get_settings()
    engine, session_factory = build_session_factory(settings.database_url)
    verifier = IdentityVerifier.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Apiary server starting up...")
        if settings.create_schema:
            await create_schema(engine)
            logger.info("Database schema ready.")

        yield

        logger.info("Apiary server shutting down - disposing database engine...")
        await engine.dispose()
        logger.info("Database engine disposed.")

    app = FastAPI(
        title="Apiary",
        description="Hive and queen records scoped to the authenticated beekeeper",
        version=__version__,
        lifespan=lifespan,
        generate_unique_id_function=custom_generate_unique_id,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.identity_verifier = verifier

    register_exception_handlers(app)

    @app.get("/health", include_in_schema=False)
    async def health() -> JSONResponse:
        """Simple health check endpoint for load balancers and readiness probes."""
        return JSONResponse({"status": "ok", "service": "apiary"})

    app.include_router(api_router)
    return app
