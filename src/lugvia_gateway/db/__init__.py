"""
lugvia_gateway.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide the document model, engine/session setup, and repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Collections (quotes/tickets/contacts) share one table keyed by collection name.
