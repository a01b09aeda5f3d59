"""
lugvia_gateway

Top-level package for the Lugvia API gateway service.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal; the app factory lives in `lugvia_gateway.api.app`.
