"""
tests.test_federated_verifier

Federated identity-token verification against a mocked JWKS endpoint, and the
full gateway chain with real verifiers on both sides.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from conftest import PROJECT_ID, FakeClock, make_request
from lugvia_gateway.auth.errors import InvalidCredential
from lugvia_gateway.auth.gateway import AuthGateway
from lugvia_gateway.auth.jwt import JwtConfig
from lugvia_gateway.auth.models import SourceKind
from lugvia_gateway.auth.verifiers import (
    FederatedConfig,
    FederatedTokenVerifier,
    LocalTokenVerifier,
    TokenVerificationError,
)

JWKS_URL = "https://keys.example.test/jwks"


def _jwks_transport(jwks: dict[str, Any], hits: list[httpx.Request]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        hits.append(request)
        return httpx.Response(200, json=jwks)

    return httpx.MockTransport(handler)


def _cfg(**overrides: Any) -> FederatedConfig:
    values: dict[str, Any] = {
        "project_id": PROJECT_ID,
        "jwks_url": JWKS_URL,
        "timeout_seconds": 1.0,
        "jwks_cache_seconds": 600.0,
    }
    values.update(overrides)
    return FederatedConfig(**values)


@pytest.mark.asyncio
async def test_valid_token_yields_claims(jwks, federated_token) -> None:
    hits: list[httpx.Request] = []
    async with httpx.AsyncClient(transport=_jwks_transport(jwks, hits)) as http:
        verifier = FederatedTokenVerifier(cfg=_cfg(), http=http)
        token = federated_token(sub="uid-42", email="a@example.com")

        claims = await verifier.verify(token)
        principal = verifier.to_principal(claims)

    assert principal.id == "uid-42"
    assert principal.email == "a@example.com"
    assert principal.source_kind is SourceKind.FEDERATED_TOKEN
    assert principal.role is None
    assert principal.claims == claims
    assert claims["aud"] == PROJECT_ID
    assert len(hits) == 1


@pytest.mark.asyncio
async def test_keys_are_cached_until_stale(jwks, federated_token) -> None:
    hits: list[httpx.Request] = []
    clock = FakeClock()
    async with httpx.AsyncClient(transport=_jwks_transport(jwks, hits)) as http:
        verifier = FederatedTokenVerifier(cfg=_cfg(), http=http, clock=clock)

        await verifier.verify(federated_token())
        await verifier.verify(federated_token())
        assert len(hits) == 1

        clock.advance(601)
        await verifier.verify(federated_token())
        assert len(hits) == 2


@pytest.mark.asyncio
async def test_unknown_kid_forces_refresh_then_rejects(jwks, federated_token) -> None:
    hits: list[httpx.Request] = []
    async with httpx.AsyncClient(transport=_jwks_transport(jwks, hits)) as http:
        verifier = FederatedTokenVerifier(cfg=_cfg(), http=http)
        await verifier.verify(federated_token())

        with pytest.raises(TokenVerificationError):
            await verifier.verify(federated_token(kid="rotated-away"))

    assert len(hits) == 2


@pytest.mark.asyncio
async def test_wrong_audience_rejected(jwks, federated_token) -> None:
    hits: list[httpx.Request] = []
    async with httpx.AsyncClient(transport=_jwks_transport(jwks, hits)) as http:
        verifier = FederatedTokenVerifier(cfg=_cfg(project_id="another-project"), http=http)

        with pytest.raises(TokenVerificationError):
            await verifier.verify(federated_token())


@pytest.mark.asyncio
async def test_garbage_token_rejected_without_key_fetch(jwks) -> None:
    hits: list[httpx.Request] = []
    async with httpx.AsyncClient(transport=_jwks_transport(jwks, hits)) as http:
        verifier = FederatedTokenVerifier(cfg=_cfg(), http=http)

        with pytest.raises(TokenVerificationError):
            await verifier.verify("garbage")

    assert hits == []


@pytest.mark.asyncio
async def test_disabled_without_project_id(jwks, federated_token) -> None:
    hits: list[httpx.Request] = []
    async with httpx.AsyncClient(transport=_jwks_transport(jwks, hits)) as http:
        verifier = FederatedTokenVerifier(cfg=_cfg(project_id=""), http=http)

        with pytest.raises(TokenVerificationError):
            await verifier.verify(federated_token())

    assert hits == []


@pytest.mark.asyncio
async def test_key_endpoint_failure_is_a_rejection(federated_token) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable"))
    async with httpx.AsyncClient(transport=transport) as http:
        verifier = FederatedTokenVerifier(cfg=_cfg(), http=http)

        with pytest.raises(TokenVerificationError):
            await verifier.verify(federated_token())


@pytest.mark.asyncio
async def test_slow_key_endpoint_is_timeboxed(jwks, federated_token) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json=jwks)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        verifier = FederatedTokenVerifier(cfg=_cfg(timeout_seconds=0.05), http=http)

        with pytest.raises(TokenVerificationError, match="timed out"):
            await verifier.verify(federated_token())


@pytest.mark.asyncio
async def test_gateway_with_real_verifiers(jwt_cfg: JwtConfig, jwks, federated_token) -> None:
    hits: list[httpx.Request] = []
    async with httpx.AsyncClient(transport=_jwks_transport(jwks, hits)) as http:
        gateway = AuthGateway(
            [LocalTokenVerifier(jwt_cfg), FederatedTokenVerifier(cfg=_cfg(), http=http)]
        )
        token = federated_token(sub="uid-7")

        principal = await gateway.authenticate(
            make_request(headers={"Authorization": f"Bearer {token}"})
        )
        assert principal.source_kind is SourceKind.FEDERATED_TOKEN
        assert principal.id == "uid-7"

        with pytest.raises(InvalidCredential):
            await gateway.authenticate(make_request(cookies={"session_token": "abc.def.ghi"}))
