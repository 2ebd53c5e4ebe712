"""
Error taxonomy for the todos API.

Every error raised by a request is terminal for that request. Errors that
reach the client carry an HTTP status code; ``AuthError`` and its subclasses
stay internal to token verification and are turned into ``Unauthorized`` by
the auth dependency.
"""

from __future__ import annotations


class TodoServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class BadRequest(TodoServiceError):
    status_code = 400


class MissingToken(BadRequest):
    """No bearer token was supplied with a protected request."""

    def __init__(self, message: str = "No token provided."):
        super().__init__(message)


class Unauthorized(TodoServiceError):
    status_code = 401


class Conflict(TodoServiceError):
    status_code = 409


class DuplicateUsername(Conflict):
    def __init__(self, username: str):
        super().__init__(f"Username already registered: {username}")
        self.username = username


class StoreError(TodoServiceError):
    """Persistence-layer failure. Never retried."""

    status_code = 500


class AuthError(Exception):
    """Token verification failure."""


class ExpiredToken(AuthError):
    pass


class InvalidSignature(AuthError):
    pass


class Malformed(AuthError):
    pass
