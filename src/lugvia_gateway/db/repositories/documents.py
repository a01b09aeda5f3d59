"""
lugvia_gateway.db.repositories.documents

Repository for `Document` entities.

Responsibilities:
- Add documents to a collection.
- Fetch a single document and count documents per collection.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lugvia_gateway.db.models import Collection, Document


class DocumentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        collection: Collection,
        data: dict[str, Any],
        created_by: str | None = None,
    ) -> Document:
        doc = Document(collection=collection, data=data, created_by=created_by)
        self._session.add(doc)
        await self._session.flush()
        return doc

    async def get(self, collection: Collection, doc_id: uuid.UUID) -> Document | None:
        stmt = select(Document).where(Document.id == doc_id, Document.collection == collection)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def counts(self) -> dict[str, int]:
        stmt = select(Document.collection, func.count()).group_by(Document.collection)
        rows = (await self._session.execute(stmt)).all()
        found = {Collection(c).value: int(n) for c, n in rows}
        # Empty collections still appear in stats.
        return {c.value: found.get(c.value, 0) for c in Collection}
