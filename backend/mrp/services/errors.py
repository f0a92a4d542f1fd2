"""
Service-layer exception taxonomy.

Services raise only these (or subclasses declared next to the service);
the API layer maps each family to one HTTP status.
"""


class ServiceError(Exception):
    """Base class for expected, user-facing failures."""


class ValidationError(ServiceError):
    """Bad input such as a missing field or an out-of-range value."""


class InvalidCredentialsError(ServiceError):
    """Login failed. Deliberately silent about which part was wrong."""


class ForbiddenError(ServiceError):
    """The acting user does not own the target entity."""


class NotFoundError(ServiceError):
    """No entity with the requested identity."""


class ConflictError(ServiceError):
    """The request clashes with current state (duplicates, illegal transitions)."""
