class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised on an illegal state transition or an overlapping leave request."""


class BadRequestError(DomainError):
    """Raised when a request is well-formed but not allowed in the current state."""


class NotFoundError(DomainError):
    """Raised when an employee, event or request id is unknown."""


class ForbiddenError(DomainError):
    """Raised on ownership violations and self-approval."""
