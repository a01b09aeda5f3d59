"""
lugvia_gateway.api.app

FastAPI app factory for the Lugvia gateway service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine, outbound HTTP client,
  auth gateway, rate window, integration client).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from lugvia_gateway import __version__
from lugvia_gateway.api.routers.admin import router as admin_router
from lugvia_gateway.api.routers.admin_auth import router as admin_auth_router
from lugvia_gateway.api.routers.chat import router as chat_router
from lugvia_gateway.api.routers.dev_auth import router as dev_auth_router
from lugvia_gateway.api.routers.documents import router as documents_router
from lugvia_gateway.api.routers.health import router as health_router
from lugvia_gateway.auth.gateway import build_auth_gateway
from lugvia_gateway.db.init_db import init_db
from lugvia_gateway.db.session import create_engine, create_sessionmaker
from lugvia_gateway.integrations.client import OutboundIntegrationClient
from lugvia_gateway.integrations.config import IntegrationConfig
from lugvia_gateway.integrations.rate_limit import RateLimitWindow
from lugvia_gateway.observability.logging import configure_logging, get_logger
from lugvia_gateway.observability.middleware import RequestContextMiddleware
from lugvia_gateway.settings import Settings

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    `http_transport` replaces the network for every outbound call (JWKS fetch and
    upstream generation); tests pass an `httpx.MockTransport` here.
    """

    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        await init_db(engine)

        # One pooled client for all outbound calls; per-call deadlines are enforced
        # by the callers with asyncio.timeout.
        http = httpx.AsyncClient(transport=http_transport)
        integration = IntegrationConfig.from_settings(settings)
        app.state.http = http
        app.state.auth_gateway = build_auth_gateway(settings=settings, http=http)
        app.state.rate_limiter = RateLimitWindow(
            limit=integration.rate_limit,
            window_seconds=settings.rate_limit_window_seconds,
        )
        app.state.integration_client = OutboundIntegrationClient(
            config=integration,
            rate_limiter=app.state.rate_limiter,
            http=http,
        )
        problems = integration.validate()
        if problems:
            log.warning("integration_misconfigured", problems=problems)
        try:
            yield
        finally:
            await http.aclose()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Lugvia API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(admin_auth_router)
    app.include_router(documents_router)
    app.include_router(chat_router)
    app.include_router(admin_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; verification and integration logic stay in the
# `auth` and `integrations` packages.
