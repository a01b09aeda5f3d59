"""
lugvia_gateway.auth

Authentication/authorization package.

Responsibilities:
- Local token helpers and validation.
- Token verification strategies (local, federated) and the gateway chaining them.
- FastAPI auth dependencies (Principal + admin guard).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The gateway does not authorize; role checks live in `auth.deps`.
