class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when there is no authenticated identity or login fails."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist or is inactive."""


class ConflictError(DomainError):
    """Raised when a concurrent write collides with the current state.

    Retryable: the caller may run the whole operation again.
    """
