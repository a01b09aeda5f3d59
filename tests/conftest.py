"""
tests.conftest

Shared fixtures and builders for auth and integration tests.
"""

from __future__ import annotations

import json
import time
from typing import Any

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm
from starlette.requests import Request

from lugvia_gateway.auth.jwt import JwtConfig

PROJECT_ID = "lugvia-test"
KID = "test-key-1"


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_request(
    headers: dict[str, str] | None = None,
    cookies: dict[str, str] | None = None,
) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        cookie = "; ".join(f"{k}={v}" for k, v in cookies.items())
        raw.append((b"cookie", cookie.encode()))
    return Request(
        {"type": "http", "method": "GET", "path": "/", "query_string": b"", "headers": raw}
    )


def completion(content: str = "Moving a 2BR usually costs $800-$2,000.") -> dict[str, Any]:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "model": "gpt-3.5-turbo-0125",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": f"  {content}\n"},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 120, "completion_tokens": 18, "total_tokens": 138},
    }


@pytest.fixture()
def jwt_cfg() -> JwtConfig:
    return JwtConfig(
        alg="HS256",
        issuer="lugvia-admin",
        audience="lugvia-admin-panel",
        secret="lugvia-test-secret-0123456789abcdef",
    )


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def jwks(rsa_key: rsa.RSAPrivateKey) -> dict[str, Any]:
    jwk = json.loads(RSAAlgorithm.to_jwk(rsa_key.public_key()))
    jwk.update({"kid": KID, "alg": "RS256", "use": "sig"})
    return {"keys": [jwk]}


@pytest.fixture()
def federated_token(rsa_key: rsa.RSAPrivateKey):
    def _make(
        *,
        sub: str = "firebase-uid-1",
        email: str | None = "customer@example.com",
        kid: str = KID,
        ttl: int = 3600,
        **extra: Any,
    ) -> str:
        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": f"https://securetoken.google.com/{PROJECT_ID}",
            "aud": PROJECT_ID,
            "sub": sub,
            "user_id": sub,
            "iat": now,
            "exp": now + ttl,
            "auth_time": now,
            **extra,
        }
        if email is not None:
            payload["email"] = email
        return jwt.encode(payload, rsa_key, algorithm="RS256", headers={"kid": kid})

    return _make
