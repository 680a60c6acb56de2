"""Domain errors.

All of them are ``ValueError`` subclasses so callers that only care about
"bad input" can keep catching ``ValueError``; the HTTP layer maps each one to
a status code.
"""
from __future__ import annotations


class NotFoundError(ValueError):
    pass


class ConflictError(ValueError):
    pass


class PermissionDeniedError(ValueError):
    pass


class InvalidCredentialsError(ValueError):
    pass


class InvalidTokenError(ValueError):
    pass


class InvalidStatusTransitionError(ConflictError):
    pass


class MessageValidationError(ValueError):
    pass


class MessagePersistenceError(RuntimeError):
    """A chat message could not be stored; nothing was delivered."""
