"""
lugvia_gateway.integrations

Outbound integration package.

Responsibilities:
- Provide the rate-limited, timeboxed client for the upstream text-generation API.
- Define the normalized result types returned to chat handlers.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Routers depend on this boundary, not on httpx or the upstream wire format.
