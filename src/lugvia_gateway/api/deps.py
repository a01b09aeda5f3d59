"""
lugvia_gateway.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the integration client.
- Encapsulate app.state access patterns (sessionmaker, shared clients).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lugvia_gateway.integrations.client import OutboundIntegrationClient
from lugvia_gateway.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The app factory pins the Settings it was built with on app.state.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Routers commit explicitly.
    async with session_factory() as session:
        yield session


def integration_client(request: Request) -> OutboundIntegrationClient:
    return request.app.state.integration_client  # type: ignore[attr-defined]
