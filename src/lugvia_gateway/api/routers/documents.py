"""
lugvia_gateway.api.routers.documents

Public lead-capture endpoints backed by the document store.

Responsibilities:
- Accept quote requests, support tickets and contact messages from the site.
- Serve a stored quote back to an authenticated caller.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND

from lugvia_gateway.api.deps import db_session
from lugvia_gateway.auth.deps import get_optional_principal, get_principal
from lugvia_gateway.auth.models import Principal
from lugvia_gateway.db.models import Collection
from lugvia_gateway.db.repositories.documents import DocumentRepo
from lugvia_gateway.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["documents"])


class DocumentCreated(BaseModel):
    id: uuid.UUID


class DocumentResponse(BaseModel):
    id: uuid.UUID
    collection: str
    data: dict[str, Any]
    created_at: str


async def _create(
    session: AsyncSession,
    collection: Collection,
    body: dict[str, Any],
    principal: Principal | None,
) -> DocumentCreated:
    doc = await DocumentRepo(session).add(
        collection=collection,
        data=body,
        created_by=principal.id if principal is not None else None,
    )
    await session.commit()
    log.info("document_created", collection=collection.value, document_id=str(doc.id))
    return DocumentCreated(id=doc.id)


@router.post("/quotes", response_model=DocumentCreated, status_code=HTTP_201_CREATED)
async def create_quote(
    body: dict[str, Any],
    principal: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
) -> DocumentCreated:
    return await _create(session, Collection.quotes, body, principal)


@router.get(
    "/quotes/{quote_id}",
    response_model=DocumentResponse,
    dependencies=[Depends(get_principal)],
)
async def get_quote(
    quote_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> DocumentResponse:
    doc = await DocumentRepo(session).get(Collection.quotes, quote_id)
    if doc is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")
    return DocumentResponse(
        id=doc.id,
        collection=doc.collection.value,
        data=doc.data,
        created_at=doc.created_at.isoformat(),
    )


@router.post("/tickets", response_model=DocumentCreated, status_code=HTTP_201_CREATED)
async def create_ticket(
    body: dict[str, Any],
    principal: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
) -> DocumentCreated:
    return await _create(session, Collection.tickets, body, principal)


@router.post("/contacts", response_model=DocumentCreated, status_code=HTTP_201_CREATED)
async def create_contact(
    body: dict[str, Any],
    principal: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
) -> DocumentCreated:
    return await _create(session, Collection.contacts, body, principal)


# --- Module Notes -----------------------------------------------------------
# Create endpoints stay open to anonymous site visitors; a bad credential on them
# is still rejected with 401 rather than silently ignored.
