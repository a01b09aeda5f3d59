"""
lugvia_gateway.integrations.config

Immutable configuration for the upstream text-generation client.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lugvia_gateway.settings import Settings

PLACEHOLDER_API_KEY = "your_openai_api_key_here"


@dataclass(frozen=True, slots=True)
class IntegrationConfig:
    api_key: str = field(repr=False)
    model: str
    max_tokens: int = 1000
    rate_limit: int = 100
    timeout_ms: int = 30000
    api_url: str = "https://api.openai.com/v1/chat/completions"

    @classmethod
    def from_settings(cls, settings: Settings) -> IntegrationConfig:
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            max_tokens=settings.openai_max_tokens,
            rate_limit=settings.api_rate_limit,
            timeout_ms=settings.api_timeout_ms,
            api_url=settings.openai_api_url,
        )

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def validate(self) -> list[str]:
        errors: list[str] = []
        if not self.api_key:
            errors.append("API key is required")
        elif self.api_key == PLACEHOLDER_API_KEY:
            errors.append("API key is a placeholder")
        elif not self.api_key.isascii():
            # Sent verbatim in the Authorization header, which is ASCII-only.
            errors.append("API key contains non-ASCII characters")
        if not self.model:
            errors.append("model is required")
        return errors
