class DomainError(Exception):
    """Base exception for business rule violations."""

    kind = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "invalid_input"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    kind = "unauthenticated"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = "forbidden"


class NotFoundError(DomainError):
    """Raised when a referenced entity or request id does not exist."""

    kind = "not_found"


class ConflictError(DomainError):
    """Raised when a write would duplicate or contradict existing state."""

    kind = "conflict"


class ConflictReplayError(ConflictError):
    """Raised when deciding a change request that is no longer PENDING."""

    kind = "conflict_replay"
