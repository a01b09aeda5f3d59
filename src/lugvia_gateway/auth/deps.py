"""
lugvia_gateway.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Resolve the request's credential into a typed `Principal` via the gateway.
- Map gateway errors to 401 responses without revealing which verifier ran.
- Provide the admin guard used by protected admin routes.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from lugvia_gateway.auth.errors import AuthError, MissingCredential
from lugvia_gateway.auth.gateway import AuthGateway
from lugvia_gateway.auth.models import Principal


def get_auth_gateway(request: Request) -> AuthGateway:
    # The gateway is built on app startup in `lugvia_gateway.api.app.create_app`.
    return request.app.state.auth_gateway  # type: ignore[attr-defined]


async def get_principal(
    request: Request,
    gateway: AuthGateway = Depends(get_auth_gateway),
) -> Principal:
    try:
        return await gateway.authenticate(request)
    except AuthError as e:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_optional_principal(
    request: Request,
    gateway: AuthGateway = Depends(get_auth_gateway),
) -> Principal | None:
    # Anonymous callers are allowed; a present-but-bad credential is still rejected.
    try:
        return await gateway.authenticate(request)
    except MissingCredential:
        return None
    except AuthError as e:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Admin access required")
    return principal


# --- Module Notes -----------------------------------------------------------
# These dependencies guard:
# - document reads (any authenticated principal)
# - admin stats and integration status (role=admin, local tokens only)
