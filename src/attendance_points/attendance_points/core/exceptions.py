class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class PointStateError(ValidationError):
    """Raised on a transition out of a terminal attendance point state."""


class ConcurrencyError(DomainError):
    """Raised when a shift record keeps changing underneath a writer."""


class LockNotAcquiredError(DomainError):
    """Raised when a job lock held by another instance cannot be taken."""
