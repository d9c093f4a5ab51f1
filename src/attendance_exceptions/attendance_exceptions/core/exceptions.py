class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidStateError(ValidationError):
    """Raised when a request is not in a state that allows the operation."""


class NotFoundError(DomainError):
    """Raised when an employee, request, workflow, step or file does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ConflictError(DomainError):
    """Raised when a concurrent update won the race; reload and retry."""
