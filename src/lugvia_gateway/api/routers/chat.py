"""
lugvia_gateway.api.routers.chat

Chat assistant endpoint.

Responsibilities:
- Forward the visitor's message and context to the integration client.
- Log the raw failure cause server-side and return only the generic message.
- Map failure categories to HTTP statuses.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.status import (
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
    HTTP_504_GATEWAY_TIMEOUT,
)

from lugvia_gateway.api.deps import integration_client
from lugvia_gateway.auth.deps import get_optional_principal
from lugvia_gateway.auth.models import Principal
from lugvia_gateway.integrations.client import OutboundIntegrationClient
from lugvia_gateway.integrations.results import FailureCategory, Success
from lugvia_gateway.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/v1/chat", tags=["chat"])

FAILURE_STATUS: dict[FailureCategory, int] = {
    FailureCategory.RATE_LIMITED: HTTP_429_TOO_MANY_REQUESTS,
    FailureCategory.CONFIGURATION_ERROR: HTTP_503_SERVICE_UNAVAILABLE,
    FailureCategory.TIMEOUT: HTTP_504_GATEWAY_TIMEOUT,
    FailureCategory.UPSTREAM_ERROR: HTTP_502_BAD_GATEWAY,
    FailureCategory.MALFORMED_RESPONSE: HTTP_502_BAD_GATEWAY,
}


class ChatContext(BaseModel):
    user_profile: dict[str, Any] | None = None
    last_quotes: list[dict[str, Any]] | None = None
    current_recommendations: list[dict[str, Any]] | None = None
    conversation_history: list[dict[str, Any]] = Field(default_factory=list)


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=4000)
    context: ChatContext = Field(default_factory=ChatContext)


@router.post("")
async def chat(
    body: ChatRequest,
    principal: Principal | None = Depends(get_optional_principal),
    client: OutboundIntegrationClient = Depends(integration_client),
) -> JSONResponse:
    result = await client.generate(body.message, body.context.model_dump(exclude_none=True))

    if isinstance(result, Success):
        return JSONResponse(
            {
                "content": result.content,
                "model": result.model,
                "usage": result.usage,
                "timestamp": result.timestamp,
                "error": False,
            }
        )

    log.warning(
        "chat_generation_failed",
        category=result.category.value,
        detail=result.detail,
        upstream_status=result.status_code,
        principal_id=principal.id if principal is not None else None,
    )
    return JSONResponse(
        {
            "content": result.user_message,
            "category": result.category.value,
            "timestamp": result.timestamp,
            "error": True,
        },
        status_code=FAILURE_STATUS[result.category],
    )


# --- Module Notes -----------------------------------------------------------
# Timeouts map to 504 so the site can distinguish a slow upstream from a broken one;
# the message body is the same generic text either way.
