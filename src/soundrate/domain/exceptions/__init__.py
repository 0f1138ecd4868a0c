"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, message is stored as an attribute so handlers can read it without
    # parsing str(exception). Never raise this directly - pick a subclass so callers can
    # catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity that must exist is missing.

    Services return None for lookups; the API layer raises this when the
    addressed row does not exist.
    """

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityException(DomainException):
    """Raised when trying to create a duplicate entity."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(DomainException):
    """Input validation failed.

    Raised for malformed caller input BEFORE any network or datastore call.

    HTTP Status: 422

    Example:
        raise ValidationError("rating must be between 0.5 and 5")
    """

    pass


class BusinessRuleViolation(DomainException):
    """A business rule was violated.

    HTTP Status: 400

    Example:
        raise BusinessRuleViolation("Cannot follow yourself")
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    HTTP Status: 503 (Service Unavailable)

    Example:
        raise ConfigurationError("SPOTIFY_CLIENT_ID is not configured")
    """

    pass


class AuthenticationError(DomainException):
    """Caller is not authenticated.

    HTTP Status: 401
    """

    pass


class CatalogAuthError(AuthenticationError):
    """The client-credentials exchange with the catalog failed.

    Fatal to the in-flight call only. The token cache is left untouched, so the
    next call retries the exchange.

    HTTP Status: 502 (our credentials, not the caller's, were rejected)
    """

    def __init__(self, message: str, http_status: int | None = None) -> None:
        super().__init__(message)
        self.http_status = http_status


class ExternalServiceError(DomainException):
    """External service returned an error.

    HTTP Status: 502 (Bad Gateway)
    """

    pass


class UpstreamUnavailableError(ExternalServiceError):
    """A catalog read failed: non-2xx, transport error, timeout or bad payload.

    Propagated for single-entity reads, swallowed to an empty result for
    aggregate/list reads.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.http_status = http_status  # None for transport and schema faults


class RateLimitExceededError(ExternalServiceError):
    """Catalog kept answering 429 after all retries.

    HTTP Status: 429
    """

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


__all__ = [
    "AuthenticationError",
    "BusinessRuleViolation",
    "CatalogAuthError",
    "ConfigurationError",
    "DomainException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "ExternalServiceError",
    "RateLimitExceededError",
    "UpstreamUnavailableError",
    "ValidationError",
]
