"""
tests.test_api

End-to-end API tests through the ASGI app with an in-memory document store and
a mocked upstream.

Responsibilities:
- Ensure the app boots and probes answer.
- Exercise the auth guard, admin guard, document endpoints and chat mapping.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

import bcrypt
import httpx
import pytest
from fastapi import FastAPI

from conftest import completion
from lugvia_gateway.api.app import create_app
from lugvia_gateway.auth.jwt import issue_token
from lugvia_gateway.auth.verifiers import local_jwt_config
from lugvia_gateway.settings import Settings

API_URL = "https://llm.example.test/v1/chat/completions"
ADMIN_PASSWORD = "correct horse battery staple"
ADMIN_PASSWORD_HASH = bcrypt.hashpw(ADMIN_PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()


def _settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "env": "test",
        "database_url": "sqlite+aiosqlite://",
        "jwt_secret": "api-test-secret-0123456789abcdef",
        "openai_api_key": "sk-test-key",
        "openai_api_url": API_URL,
        "api_rate_limit": 5,
        "api_timeout_ms": 2000,
    }
    values.update(overrides)
    return Settings(**values)


@asynccontextmanager
async def running_app(
    settings: Settings, upstream_calls: list[httpx.Request] | None = None
) -> AsyncIterator[tuple[FastAPI, httpx.AsyncClient]]:
    calls = upstream_calls if upstream_calls is not None else []

    def upstream(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=completion("Book movers 4-6 weeks ahead."))

    app = create_app(settings=settings, http_transport=httpx.MockTransport(upstream))
    # httpx's ASGITransport does not run lifespan; drive it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield app, client


def _token(settings: Settings, subject: str = "user-1", role: str | None = None) -> str:
    return issue_token(
        cfg=local_jwt_config(settings),
        subject=subject,
        email=f"{subject}@example.com",
        role=role,
        ttl=timedelta(minutes=5),
    )


@pytest.mark.asyncio
async def test_health_endpoints() -> None:
    async with running_app(_settings()) as (_, client):
        r = await client.get("/healthz")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"
        assert r.headers["x-request-id"]

        r = await client.get("/readyz", headers={"x-request-id": "req-123"})
        assert r.status_code == 200
        assert r.json()["status"] == "ready"
        assert r.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_quote_roundtrip_requires_auth() -> None:
    settings = _settings()
    async with running_app(settings) as (_, client):
        r = await client.post(
            "/v1/quotes", json={"from": "Austin, TX", "to": "Denver, CO", "size": "2BR"}
        )
        assert r.status_code == 201
        quote_id = r.json()["id"]

        r = await client.get(f"/v1/quotes/{quote_id}")
        assert r.status_code == 401
        assert r.json()["detail"] == "Authentication required"
        assert r.headers["www-authenticate"] == "Bearer"

        r = await client.get(
            f"/v1/quotes/{quote_id}", headers={"Authorization": "Bearer garbage"}
        )
        assert r.status_code == 401
        assert r.json()["detail"] == "Invalid credentials"

        r = await client.get(
            f"/v1/quotes/{quote_id}",
            headers={"Authorization": f"Bearer {_token(settings)}"},
        )
        assert r.status_code == 200
        body = r.json()
        assert body["collection"] == "quotes"
        assert body["data"]["to"] == "Denver, CO"


@pytest.mark.asyncio
async def test_unknown_quote_is_404() -> None:
    settings = _settings()
    async with running_app(settings) as (_, client):
        r = await client.get(
            "/v1/quotes/00000000-0000-0000-0000-000000000000",
            headers={"Authorization": f"Bearer {_token(settings)}"},
        )
        assert r.status_code == 404


@pytest.mark.asyncio
async def test_bad_credential_on_public_form_is_rejected() -> None:
    async with running_app(_settings()) as (_, client):
        r = await client.post(
            "/v1/tickets",
            json={"subject": "Damaged box"},
            headers={"Cookie": "session_token=forged"},
        )
        assert r.status_code == 401


@pytest.mark.asyncio
async def test_admin_stats_guard_and_counts() -> None:
    settings = _settings()
    async with running_app(settings) as (_, client):
        await client.post("/v1/quotes", json={"size": "studio"})
        await client.post("/v1/tickets", json={"subject": "Where is my quote?"})
        await client.post("/v1/tickets", json={"subject": "Refund"})

        r = await client.get(
            "/v1/admin/stats", headers={"Authorization": f"Bearer {_token(settings)}"}
        )
        assert r.status_code == 403

        admin = _token(settings, subject="admin", role="admin")
        r = await client.get("/v1/admin/stats", headers={"Cookie": f"admin_token={admin}"})
        assert r.status_code == 200
        assert r.json() == {"quotes": 1, "tickets": 2, "contacts": 0}


@pytest.mark.asyncio
async def test_chat_success_and_rate_limit() -> None:
    calls: list[httpx.Request] = []
    async with running_app(_settings(api_rate_limit=2), calls) as (_, client):
        for _ in range(2):
            r = await client.post("/v1/chat", json={"message": "When should I book movers?"})
            assert r.status_code == 200
            body = r.json()
            assert body["error"] is False
            assert body["content"] == "Book movers 4-6 weeks ahead."

        r = await client.post("/v1/chat", json={"message": "And a third question?"})
        assert r.status_code == 429
        body = r.json()
        assert body["error"] is True
        assert body["category"] == "rate_limited"
        assert "wait a moment" in body["content"]

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_chat_without_api_key() -> None:
    calls: list[httpx.Request] = []
    async with running_app(_settings(openai_api_key=""), calls) as (_, client):
        r = await client.post("/v1/chat", json={"message": "hello"})
        assert r.status_code == 503
        assert "contact support" in r.json()["content"]

    assert calls == []


@pytest.mark.asyncio
async def test_chat_rejects_empty_message() -> None:
    async with running_app(_settings()) as (_, client):
        r = await client.post("/v1/chat", json={"message": ""})
        assert r.status_code == 422


@pytest.mark.asyncio
async def test_integration_status_is_admin_only() -> None:
    settings = _settings()
    async with running_app(settings) as (_, client):
        r = await client.get("/v1/admin/integration-status")
        assert r.status_code == 401

        admin = _token(settings, subject="admin", role="admin")
        r = await client.get(
            "/v1/admin/integration-status", headers={"Authorization": f"Bearer {admin}"}
        )
        assert r.status_code == 200
        assert r.json()["success"] is True
        assert r.json()["message"] == "Connection successful"


@pytest.mark.asyncio
async def test_dev_token_endpoint() -> None:
    async with running_app(_settings()) as (_, client):
        r = await client.post("/v1/dev/token", json={"subject": "ops", "role": "admin"})
        assert r.status_code == 200
        token = r.json()["access_token"]

        r = await client.get("/v1/admin/stats", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200

    async with running_app(_settings(env="prod")) as (_, client):
        r = await client.post("/v1/dev/token", json={"subject": "ops"})
        assert r.status_code == 404


def _admin_settings(**overrides: Any) -> Settings:
    return _settings(
        admin_username="ops-admin", admin_password_hash=ADMIN_PASSWORD_HASH, **overrides
    )


@pytest.mark.asyncio
async def test_admin_login_sets_cookie_and_unlocks_admin_routes() -> None:
    async with running_app(_admin_settings()) as (_, client):
        r = await client.post(
            "/v1/auth/login", json={"username": "ops-admin", "password": ADMIN_PASSWORD}
        )
        assert r.status_code == 200
        assert r.json()["access_token"]
        cookie = r.headers["set-cookie"].lower()
        assert cookie.startswith("admin_token=")
        assert "httponly" in cookie
        assert "samesite=strict" in cookie
        assert "secure" not in cookie

        r = await client.get("/v1/auth/me")
        assert r.status_code == 200
        assert r.json() == {
            "id": "ops-admin",
            "source_kind": "local_token",
            "email": None,
            "role": "admin",
            "is_admin": True,
        }

        r = await client.get("/v1/admin/stats")
        assert r.status_code == 200

        r = await client.post("/v1/auth/logout")
        assert r.status_code == 200
        assert "admin_token" not in client.cookies

        r = await client.get("/v1/auth/me")
        assert r.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username,password",
    [("ops-admin", "wrong password"), ("someone-else", ADMIN_PASSWORD)],
)
async def test_admin_login_rejects_bad_credentials(username: str, password: str) -> None:
    async with running_app(_admin_settings()) as (_, client):
        r = await client.post("/v1/auth/login", json={"username": username, "password": password})
        assert r.status_code == 401
        assert r.json()["detail"] == "Invalid credentials"
        assert "set-cookie" not in r.headers


@pytest.mark.asyncio
async def test_admin_login_unconfigured_or_bad_hash() -> None:
    async with running_app(_settings()) as (_, client):
        r = await client.post("/v1/auth/login", json={"username": "a", "password": "b"})
        assert r.status_code == 503

    bad_hash = _settings(admin_username="a", admin_password_hash="plain")
    async with running_app(bad_hash) as (_, client):
        r = await client.post("/v1/auth/login", json={"username": "a", "password": "plain"})
        assert r.status_code == 401


@pytest.mark.asyncio
async def test_me_reports_non_admin_principal() -> None:
    settings = _settings()
    async with running_app(settings) as (_, client):
        r = await client.get(
            "/v1/auth/me", headers={"Authorization": f"Bearer {_token(settings)}"}
        )
        assert r.status_code == 200
        assert r.json()["id"] == "user-1"
        assert r.json()["email"] == "user-1@example.com"
        assert r.json()["is_admin"] is False

        r = await client.get("/v1/auth/me")
        assert r.status_code == 401


@pytest.mark.asyncio
async def test_admin_login_cookie_is_secure_in_prod() -> None:
    async with running_app(_admin_settings(env="prod")) as (_, client):
        r = await client.post(
            "/v1/auth/login", json={"username": "ops-admin", "password": ADMIN_PASSWORD}
        )
        assert r.status_code == 200
        assert "secure" in r.headers["set-cookie"].lower()
