"""
lugvia_gateway.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (token secret, upstream API key).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single settings object resolved once at startup and injected across layers.
    Every option maps to a `LUGVIA_<NAME>` environment variable.
    """

    model_config = SettingsConfigDict(env_prefix="LUGVIA_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "lugvia-gateway"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Local (self-issued) tokens
    jwt_alg: str = "HS256"
    jwt_issuer: str = "lugvia-admin"
    jwt_audience: str = "lugvia-admin-panel"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Admin panel login; an empty username or hash disables the login route.
    admin_username: str = ""
    admin_password_hash: str = Field(default="", repr=False)
    admin_session_hours: float = 8.0

    # Federated identity tokens; an empty project id disables the verifier.
    federated_project_id: str = ""
    federated_jwks_url: str = (
        "https://www.googleapis.com/service_accounts/v1/jwk/"
        "securetoken@system.gserviceaccount.com"
    )
    federated_timeout_seconds: float = 5.0
    federated_jwks_cache_seconds: int = 3600

    # Upstream text generation
    openai_api_key: str = Field(default="", repr=False)
    openai_model: str = "gpt-3.5-turbo"
    openai_max_tokens: int = 1000
    openai_api_url: str = "https://api.openai.com/v1/chat/completions"
    api_rate_limit: int = 100
    api_timeout_ms: int = 30000
    rate_limit_window_seconds: float = 60.0

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./lugvia.db"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Integration options are copied into an immutable `IntegrationConfig` at startup
# (see `lugvia_gateway.integrations.config`) so the client never reads env directly.
