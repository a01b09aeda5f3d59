"""
lugvia_gateway.db.models

Persistence schema for lead documents.

Responsibilities:
- Store quote requests, support tickets and contact messages as JSON
  documents grouped by collection name.
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Enum, Index, String, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from lugvia_gateway.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(tz=UTC).replace(tzinfo=None)


class Collection(enum.StrEnum):
    # Values are stored in DB; treat as stable API contract.
    quotes = "quotes"
    tickets = "tickets"
    contacts = "contacts"


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    collection: Mapped[Collection] = mapped_column(Enum(Collection), nullable=False, index=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    # Principal id of the caller who created it, when the request was authenticated.
    created_by: Mapped[str | None] = mapped_column(String(256), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    __table_args__ = (Index("ix_documents_collection_created", "collection", "created_at"),)


# --- Module Notes -----------------------------------------------------------
# Form payloads vary between site versions, so `data` is left schemaless.
