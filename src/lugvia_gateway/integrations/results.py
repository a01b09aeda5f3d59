"""
lugvia_gateway.integrations.results

Request and result types for the upstream text-generation client.

Responsibilities:
- Build the fixed two-message request payload.
- Represent outcomes as `Success` / `Failure` values (never exceptions).
- Own the fixed failure-category -> user message table.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

# Sampling parameters are fixed so output variability comes only from upstream.
TEMPERATURE = 0.7
TOP_P = 1
FREQUENCY_PENALTY = 0
PRESENCE_PENALTY = 0


class FailureCategory(enum.StrEnum):
    CONFIGURATION_ERROR = "configuration_error"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    UPSTREAM_ERROR = "upstream_error"
    MALFORMED_RESPONSE = "malformed_response"


_APOLOGY = "I'm sorry, I'm having trouble connecting to my AI services right now. "

USER_MESSAGES: dict[FailureCategory, str] = {
    FailureCategory.RATE_LIMITED: _APOLOGY + "Please wait a moment before trying again.",
    FailureCategory.CONFIGURATION_ERROR: _APOLOGY
    + "There seems to be a configuration issue. Please contact support.",
    FailureCategory.UPSTREAM_ERROR: _APOLOGY + "Please try again later.",
    FailureCategory.TIMEOUT: _APOLOGY + "Please try again later.",
    FailureCategory.MALFORMED_RESPONSE: _APOLOGY + "Please try again later.",
}


def utc_timestamp() -> str:
    return datetime.now(tz=UTC).isoformat()


@dataclass(frozen=True, slots=True)
class IntegrationRequest:
    system_prompt: str
    user_message: str
    model: str
    max_tokens: int
    temperature: float = TEMPERATURE

    def to_payload(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": self.user_message},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": TOP_P,
            "frequency_penalty": FREQUENCY_PENALTY,
            "presence_penalty": PRESENCE_PENALTY,
        }


@dataclass(frozen=True, slots=True)
class Success:
    content: str
    usage: dict[str, Any] | None
    model: str
    timestamp: str
    ok: bool = True


@dataclass(frozen=True, slots=True)
class Failure:
    """
    Normalized failure. Only `user_message` may reach an end user; `detail` and
    `status_code` are for server-side logging.
    """

    user_message: str
    category: FailureCategory
    timestamp: str
    detail: str | None = None
    status_code: int | None = None
    ok: bool = False

    @classmethod
    def of(
        cls,
        category: FailureCategory,
        *,
        detail: str | None = None,
        status_code: int | None = None,
        timestamp: str | None = None,
    ) -> Failure:
        return cls(
            user_message=USER_MESSAGES[category],
            category=category,
            timestamp=timestamp or utc_timestamp(),
            detail=detail,
            status_code=status_code,
        )


IntegrationResult = Success | Failure


# --- Module Notes -----------------------------------------------------------
# The message table is static; callers map categories to HTTP
# statuses themselves (see `api/routers/chat.py`).
