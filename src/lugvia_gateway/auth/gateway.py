"""
lugvia_gateway.auth.gateway

Hybrid request authentication.

Responsibilities:
- Locate the bearer credential on a request (header, then cookies).
- Run an ordered chain of verifiers and stop at the first that accepts.
- Surface only `MissingCredential` / `InvalidCredential` to callers.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol

import httpx

from lugvia_gateway.auth.errors import InvalidCredential, MissingCredential
from lugvia_gateway.auth.models import Principal
from lugvia_gateway.auth.verifiers import (
    FederatedTokenVerifier,
    LocalTokenVerifier,
    TokenVerificationError,
    TokenVerifier,
    federated_config,
    local_jwt_config,
)
from lugvia_gateway.observability.logging import get_logger
from lugvia_gateway.settings import Settings

log = get_logger(__name__)

CREDENTIAL_COOKIES: tuple[str, ...] = ("admin_token", "session_token")


class CredentialCarrier(Protocol):
    # Satisfied by `starlette.requests.Request`.
    @property
    def headers(self) -> Mapping[str, str]: ...

    @property
    def cookies(self) -> Mapping[str, str]: ...


class AuthGateway:
    def __init__(self, verifiers: Sequence[TokenVerifier]) -> None:
        if not verifiers:
            raise ValueError("at least one verifier is required")
        self._verifiers = tuple(verifiers)

    @property
    def verifiers(self) -> tuple[TokenVerifier, ...]:
        return self._verifiers

    @staticmethod
    def extract_credential(request: CredentialCarrier) -> str | None:
        header = request.headers.get("authorization") or ""
        scheme, _, token = header.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()

        for name in CREDENTIAL_COOKIES:
            value = request.cookies.get(name)
            if value:
                return value
        return None

    async def authenticate(self, request: CredentialCarrier) -> Principal:
        token = self.extract_credential(request)
        if token is None:
            raise MissingCredential()

        for verifier in self._verifiers:
            try:
                claims = await verifier.verify(token)
            except TokenVerificationError as e:
                log.debug("auth_verifier_rejected", verifier=verifier.name, reason=str(e))
                continue
            return verifier.to_principal(claims)

        raise InvalidCredential()


def build_auth_gateway(*, settings: Settings, http: httpx.AsyncClient) -> AuthGateway:
    # Local tokens are tried first; federated verification may need a key fetch.
    return AuthGateway(
        [
            LocalTokenVerifier(local_jwt_config(settings)),
            FederatedTokenVerifier(cfg=federated_config(settings), http=http),
        ]
    )


# --- Module Notes -----------------------------------------------------------
# The gateway does not check roles. `auth.deps.require_admin` does that for
# routes that need it.
