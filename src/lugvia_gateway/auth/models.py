"""
lugvia_gateway.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
- Record which trust domain produced it (`SourceKind`).
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


class SourceKind(enum.StrEnum):
    LOCAL_TOKEN = "local_token"
    FEDERATED_TOKEN = "federated_token"


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity, built fresh for each request.

    `role` is only populated for locally-issued tokens; `claims` only for
    federated ones.
    """

    id: str
    source_kind: SourceKind
    email: str | None = None
    role: str | None = None
    claims: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("principal id must be non-empty")

    @property
    def is_admin(self) -> bool:
        return self.source_kind is SourceKind.LOCAL_TOKEN and self.role == "admin"


# --- Module Notes -----------------------------------------------------------
# Keep this model minimal; it is never persisted and dies with the request.
