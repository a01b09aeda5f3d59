"""
lugvia_gateway.auth.jwt

Local token issuing and validation helpers.

Responsibilities:
- Issue signed tokens for the admin panel and local/dev scenarios.
- Decode and validate local tokens (signature, expiry, issuer, audience).

Note:
- Local tokens are HS256 with a process-wide secret; federated tokens are
  handled separately in `auth.verifiers`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str = field(repr=False)


class JwtValidationError(Exception):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    email: str | None = None,
    role: str | None = None,
    ttl: timedelta = timedelta(hours=8),
    extra_claims: Mapping[str, Any] | None = None,
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    if email is not None:
        payload["email"] = email
    if role is not None:
        payload["role"] = role
    if extra_claims:
        # Registered claims above always win.
        payload = {**extra_claims, **payload}
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        # jwt.decode enforces signature + registered claims (issuer/audience/exp).
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iss", "aud"],
            },
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by:
# - `api/routers/admin_auth.py` (admin panel login cookie)
# - `api/routers/dev_auth.py` (dev convenience)
# - tests that exercise the local verification path
