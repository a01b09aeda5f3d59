"""
lugvia_gateway.auth.errors

Errors that cross the authentication gateway boundary.
"""

from __future__ import annotations


class AuthError(Exception):
    pass


class MissingCredential(AuthError):
    def __init__(self) -> None:
        super().__init__("Authentication required")


class InvalidCredential(AuthError):
    # One fixed message regardless of which verifier rejected the token.
    def __init__(self) -> None:
        super().__init__("Invalid credentials")
