"""
lugvia_gateway.integrations.client

HTTP client boundary for the upstream text-generation service.

Responsibilities:
- Refuse to call upstream when configuration is invalid or the rate window is full.
- Send a fixed two-message chat request under a hard deadline.
- Normalize every outcome (including transport errors and timeouts) into an
  `IntegrationResult`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from lugvia_gateway.integrations.config import IntegrationConfig
from lugvia_gateway.integrations.prompts import PromptBuilder
from lugvia_gateway.integrations.rate_limit import RateLimitWindow
from lugvia_gateway.integrations.results import (
    Failure,
    FailureCategory,
    IntegrationRequest,
    IntegrationResult,
    Success,
    utc_timestamp,
)
from lugvia_gateway.observability.logging import get_logger

log = get_logger(__name__)

CONNECTION_TEST_MESSAGE = "Hello, this is a test message."


@dataclass(frozen=True, slots=True)
class ConnectionCheck:
    success: bool
    message: str
    result: IntegrationResult


def _upstream_error_detail(response: httpx.Response) -> str:
    detail = f"{response.status_code} {response.reason_phrase}".strip()
    try:
        body = response.json()
    except ValueError:
        return detail
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        message = body["error"].get("message")
        if message:
            return f"{detail}. {message}"
    return detail


class OutboundIntegrationClient:
    """
    Calls the upstream chat-completion endpoint. Never raises: callers get a
    `Success` or a `Failure` with a stable category and a generic user message.
    No retries are attempted.
    """

    def __init__(
        self,
        *,
        config: IntegrationConfig,
        rate_limiter: RateLimitWindow,
        http: httpx.AsyncClient,
        prompts: PromptBuilder | None = None,
    ) -> None:
        self._config = config
        self._rate_limiter = rate_limiter
        self._http = http
        self._prompts = prompts or PromptBuilder()

    @property
    def config(self) -> IntegrationConfig:
        return self._config

    def build_request(
        self, user_message: str, context: Mapping[str, Any] | None = None
    ) -> IntegrationRequest:
        return IntegrationRequest(
            system_prompt=self._prompts.system_prompt(context),
            user_message=user_message,
            model=self._config.model,
            max_tokens=self._config.max_tokens,
        )

    async def generate(
        self, user_message: str, context: Mapping[str, Any] | None = None
    ) -> IntegrationResult:
        problems = self._config.validate()
        if problems:
            return Failure.of(FailureCategory.CONFIGURATION_ERROR, detail="; ".join(problems))

        if not self._rate_limiter.allow():
            return Failure.of(
                FailureCategory.RATE_LIMITED,
                detail=f"limit of {self._rate_limiter.limit} calls per window reached",
            )

        request = self.build_request(user_message, context)
        try:
            # Leaving this block on timeout cancels the in-flight request and
            # returns its connection to the pool.
            async with asyncio.timeout(self._config.timeout_seconds):
                response = await self._http.post(
                    self._config.api_url,
                    headers={"Authorization": f"Bearer {self._config.api_key}"},
                    json=request.to_payload(),
                )
        except (TimeoutError, httpx.TimeoutException):
            return Failure.of(
                FailureCategory.TIMEOUT,
                detail=f"no response within {self._config.timeout_ms}ms",
            )
        except httpx.HTTPError as e:
            return Failure.of(FailureCategory.UPSTREAM_ERROR, detail=f"{type(e).__name__}: {e}")

        if not response.is_success:
            return Failure.of(
                FailureCategory.UPSTREAM_ERROR,
                detail=_upstream_error_detail(response),
                status_code=response.status_code,
            )

        result = self._parse(response)
        if result.ok:
            self._rate_limiter.record()
            log.debug("integration_call_succeeded", model=result.model)
        return result

    def _parse(self, response: httpx.Response) -> IntegrationResult:
        try:
            data = response.json()
        except ValueError:
            return Failure.of(FailureCategory.MALFORMED_RESPONSE, detail="response is not JSON")
        if not isinstance(data, dict):
            return Failure.of(FailureCategory.MALFORMED_RESPONSE, detail="response is not an object")

        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            return Failure.of(FailureCategory.MALFORMED_RESPONSE, detail="no choices generated")

        first = choices[0] if isinstance(choices[0], dict) else {}
        message = first.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            return Failure.of(FailureCategory.MALFORMED_RESPONSE, detail="empty message content")

        usage = data.get("usage")
        return Success(
            content=content.strip(),
            usage=usage if isinstance(usage, dict) else None,
            model=str(data.get("model") or self._config.model),
            timestamp=utc_timestamp(),
        )

    async def test_connection(self) -> ConnectionCheck:
        result = await self.generate(CONNECTION_TEST_MESSAGE)
        if isinstance(result, Success):
            return ConnectionCheck(success=True, message="Connection successful", result=result)
        return ConnectionCheck(success=False, message=result.category.value, result=result)


# --- Module Notes -----------------------------------------------------------
# Only successful calls are recorded against the rate window; rejected and
# failed attempts do not consume quota.
