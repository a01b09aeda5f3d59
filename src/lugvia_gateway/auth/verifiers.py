"""
lugvia_gateway.auth.verifiers

Token verification strategies used by the authentication gateway.

Responsibilities:
- Define the uniform `TokenVerifier` capability (verify -> claims -> Principal).
- Verify locally-issued HS256 tokens with the process-wide secret.
- Verify federated identity tokens (Firebase ID-token shape) against the
  provider's published JWKS, with a bounded key fetch and a key cache.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import jwt
from jwt import InvalidTokenError, PyJWTError

from lugvia_gateway.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from lugvia_gateway.auth.models import Principal, SourceKind
from lugvia_gateway.settings import Settings


class TokenVerificationError(Exception):
    pass


class TokenVerifier(Protocol):
    name: str
    source_kind: SourceKind

    async def verify(self, token: str) -> dict[str, Any]: ...

    def to_principal(self, claims: dict[str, Any]) -> Principal: ...


def _first_str(claims: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = claims.get(key)
        if value is not None and str(value):
            return str(value)
    return None


class LocalTokenVerifier:
    name = "local"
    source_kind = SourceKind.LOCAL_TOKEN

    def __init__(self, cfg: JwtConfig) -> None:
        self._cfg = cfg

    async def verify(self, token: str) -> dict[str, Any]:
        try:
            claims = decode_and_validate(cfg=self._cfg, token=token)
        except JwtValidationError as e:
            raise TokenVerificationError(str(e)) from e
        # Admin panel tokens carry `username`, customer tokens `id`, dev tokens `sub`.
        if _first_str(claims, "sub", "id", "username") is None:
            raise TokenVerificationError("token has no subject")
        return claims

    def to_principal(self, claims: dict[str, Any]) -> Principal:
        role = _first_str(claims, "role")
        if role is None and claims.get("isAdmin") is True:
            role = "admin"
        return Principal(
            id=_first_str(claims, "sub", "id", "username") or "",
            source_kind=self.source_kind,
            email=_first_str(claims, "email"),
            role=role,
        )


@dataclass(frozen=True, slots=True)
class FederatedConfig:
    project_id: str
    jwks_url: str
    timeout_seconds: float = 5.0
    jwks_cache_seconds: float = 3600.0

    @property
    def enabled(self) -> bool:
        return bool(self.project_id)

    @property
    def issuer(self) -> str:
        return f"https://securetoken.google.com/{self.project_id}"


class FederatedTokenVerifier:
    """
    Verifies RS256 identity tokens issued by an external provider.

    Signing keys are fetched from `cfg.jwks_url` and cached by `kid`. A token
    signed with a `kid` that is not cached triggers one refresh.
    """

    name = "federated"
    source_kind = SourceKind.FEDERATED_TOKEN

    def __init__(
        self,
        *,
        cfg: FederatedConfig,
        http: httpx.AsyncClient,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cfg = cfg
        self._http = http
        self._clock = clock
        self._keys: dict[str, Any] = {}
        self._fetched_at: float | None = None

    async def verify(self, token: str) -> dict[str, Any]:
        if not self._cfg.enabled:
            raise TokenVerificationError("federated verification is not configured")

        try:
            header = jwt.get_unverified_header(token)
        except InvalidTokenError as e:
            raise TokenVerificationError(str(e)) from e
        kid = header.get("kid")
        if not kid:
            raise TokenVerificationError("token header has no kid")

        key = await self._signing_key(str(kid))
        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                audience=self._cfg.project_id,
                issuer=self._cfg.issuer,
                options={"require": ["exp", "iat", "iss", "aud", "sub"]},
            )
        except InvalidTokenError as e:
            raise TokenVerificationError(str(e)) from e
        if _first_str(claims, "sub", "user_id") is None:
            raise TokenVerificationError("token has no subject")
        return claims

    def to_principal(self, claims: dict[str, Any]) -> Principal:
        return Principal(
            id=_first_str(claims, "sub", "user_id") or "",
            source_kind=self.source_kind,
            email=_first_str(claims, "email"),
            claims=dict(claims),
        )

    def _cache_is_stale(self) -> bool:
        if self._fetched_at is None:
            return True
        return self._clock() - self._fetched_at > self._cfg.jwks_cache_seconds

    async def _signing_key(self, kid: str) -> Any:
        if self._cache_is_stale() or kid not in self._keys:
            await self._refresh_keys()
        key = self._keys.get(kid)
        if key is None:
            raise TokenVerificationError("unknown signing key")
        return key

    async def _refresh_keys(self) -> None:
        try:
            async with asyncio.timeout(self._cfg.timeout_seconds):
                r = await self._http.get(self._cfg.jwks_url)
            r.raise_for_status()
            jwks = jwt.PyJWKSet.from_dict(r.json())
        except TimeoutError as e:
            raise TokenVerificationError("signing key fetch timed out") from e
        except (httpx.HTTPError, ValueError, PyJWTError) as e:
            raise TokenVerificationError(f"signing key fetch failed: {e}") from e

        self._keys = {k.key_id: k.key for k in jwks.keys if k.key_id}
        self._fetched_at = self._clock()


def local_jwt_config(settings: Settings) -> JwtConfig:
    return JwtConfig(
        alg=settings.jwt_alg,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        secret=settings.jwt_secret,
    )


def federated_config(settings: Settings) -> FederatedConfig:
    return FederatedConfig(
        project_id=settings.federated_project_id,
        jwks_url=settings.federated_jwks_url,
        timeout_seconds=settings.federated_timeout_seconds,
        jwks_cache_seconds=settings.federated_jwks_cache_seconds,
    )


# --- Module Notes -----------------------------------------------------------
# Verifiers never raise anything but `TokenVerificationError`; the gateway relies
# on that to decide whether to fall through to the next strategy.
