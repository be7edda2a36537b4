"""
Domain exceptions.

Services raise these errors and the server maps each of them to an HTTP status
code in ``unipivot.server.exception_handlers.domain_handler``.
"""

from __future__ import annotations


class UniPivotError(Exception):
    """Base class for all domain errors."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(UniPivotError):
    """A referenced record does not exist."""

    status_code = 404


class AuthenticationError(UniPivotError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class PermissionDeniedError(UniPivotError):
    """The caller is authenticated but not allowed to do this."""

    status_code = 403


class ConflictError(UniPivotError):
    """The operation conflicts with existing state (duplicates and the like)."""

    status_code = 409


class BusinessRuleError(UniPivotError):
    """The request is well formed but violates a business rule."""

    status_code = 400
