"""
lugvia_gateway.api.routers.admin

Admin-only endpoints.

Responsibilities:
- Report document counts per collection.
- Run the upstream integration self-test.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lugvia_gateway.api.deps import db_session, integration_client
from lugvia_gateway.auth.deps import require_admin
from lugvia_gateway.auth.models import Principal
from lugvia_gateway.db.repositories.documents import DocumentRepo
from lugvia_gateway.integrations.client import OutboundIntegrationClient
from lugvia_gateway.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin"])


@router.get("/stats")
async def stats(
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> dict[str, int]:
    return await DocumentRepo(session).counts()


@router.get("/integration-status")
async def integration_status(
    principal: Principal = Depends(require_admin),
    client: OutboundIntegrationClient = Depends(integration_client),
) -> dict[str, Any]:
    check = await client.test_connection()
    log.info("integration_self_test", actor=principal.id, success=check.success)
    return {
        "success": check.success,
        "message": check.message,
        "model": client.config.model,
        "timestamp": check.result.timestamp,
    }
