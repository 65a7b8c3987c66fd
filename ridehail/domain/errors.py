"""
Failure taxonomy for the domain layer.

Every error carries the HTTP status it maps to; the API layer registers a
single handler for ``DomainError`` and renders ``{"detail": message}``.
"""

from __future__ import annotations


class DomainError(Exception):
    status_code: int = 400
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(DomainError):
    """No credential, or one that does not resolve to a live token."""

    status_code = 401
    default_message = "Unauthenticated"


class Forbidden(DomainError):
    """The caller is authenticated but a policy denies the operation."""

    status_code = 403
    default_message = "This action is unauthorized"


class NotFound(DomainError):
    status_code = 404
    default_message = "Not found"


class InvalidDomainReference(DomainError):
    """A referenced entity exists only as an id that fails a store lookup."""

    status_code = 400
    default_message = "Invalid reference"


class InvalidDriver(InvalidDomainReference):
    default_message = "Invalid driver ID"


class InvalidStateTransition(DomainError):
    """Raised when a trip status change violates the state machine."""

    status_code = 409
    default_message = "Invalid status transition"


class ValidationFailed(DomainError):
    """Input that passed shape validation but breaks a store constraint."""

    status_code = 422
    default_message = "The given data was invalid"

    def __init__(self, errors: dict[str, list[str]], message: str | None = None):
        super().__init__(message)
        self.errors = errors
