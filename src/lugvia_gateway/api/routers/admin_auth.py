"""
lugvia_gateway.api.routers.admin_auth

Admin panel sign-in and identity endpoints.

Responsibilities:
- Check the configured admin username and bcrypt password hash.
- Issue the local admin token and set it as the `admin_token` cookie.
- Clear the cookie on logout and report the current principal.
"""

from __future__ import annotations

import secrets
from datetime import timedelta

import bcrypt
from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_503_SERVICE_UNAVAILABLE

from lugvia_gateway.api.deps import settings_dep
from lugvia_gateway.auth.deps import get_principal
from lugvia_gateway.auth.jwt import issue_token
from lugvia_gateway.auth.models import Principal
from lugvia_gateway.auth.verifiers import local_jwt_config
from lugvia_gateway.observability.logging import get_logger
from lugvia_gateway.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/v1/auth", tags=["auth"])

ADMIN_COOKIE = "admin_token"


class AdminLoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=1, max_length=256)


class AdminLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class PrincipalResponse(BaseModel):
    id: str
    source_kind: str
    email: str | None = None
    role: str | None = None
    is_admin: bool


def _password_matches(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash, or a password past bcrypt's 72-byte limit.
        return False


@router.post("/login", response_model=AdminLoginResponse)
async def admin_login(
    body: AdminLoginRequest,
    response: Response,
    settings: Settings = Depends(settings_dep),
) -> AdminLoginResponse:
    if not settings.admin_username or not settings.admin_password_hash:
        log.warning("admin_login_not_configured")
        raise HTTPException(
            status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Admin login is not configured"
        )

    username_ok = secrets.compare_digest(
        body.username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    password_ok = _password_matches(body.password, settings.admin_password_hash)
    if not (username_ok and password_ok):
        log.info("admin_login_failed")
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    ttl = timedelta(hours=settings.admin_session_hours)
    token = issue_token(
        cfg=local_jwt_config(settings),
        subject=settings.admin_username,
        ttl=ttl,
        extra_claims={"username": settings.admin_username, "isAdmin": True},
    )
    max_age = int(ttl.total_seconds())
    response.set_cookie(
        ADMIN_COOKIE,
        token,
        max_age=max_age,
        httponly=True,
        secure=settings.env == "prod",
        samesite="strict",
    )
    log.info("admin_login_succeeded")
    return AdminLoginResponse(access_token=token, expires_in=max_age)


@router.post("/logout")
async def admin_logout(response: Response) -> dict[str, bool]:
    response.delete_cookie(ADMIN_COOKIE, httponly=True, samesite="strict")
    return {"success": True}


@router.get("/me", response_model=PrincipalResponse)
async def whoami(principal: Principal = Depends(get_principal)) -> PrincipalResponse:
    return PrincipalResponse(
        id=principal.id,
        source_kind=principal.source_kind.value,
        email=principal.email,
        role=principal.role,
        is_admin=principal.is_admin,
    )
