"""Custom exception handlers for FastAPI application.

Domain exceptions are converted into JSON responses with a "detail" message:

| Exception                     | Status |
|-------------------------------|--------|
| ValidationError               | 422    |
| BusinessRuleViolation         | 400    |
| AuthenticationError           | 401    |
| EntityNotFoundException       | 404    |
| DuplicateEntityException      | 409    |
| RateLimitExceededError        | 429    |
| CatalogAuthError              | 502    |
| ExternalServiceError          | 502    |
| ConfigurationError            | 503    |
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from soundrate.domain.exceptions import (
    AuthenticationError,
    BusinessRuleViolation,
    CatalogAuthError,
    ConfigurationError,
    DomainException,
    DuplicateEntityException,
    EntityNotFoundException,
    ExternalServiceError,
    RateLimitExceededError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _error(status_code: int, exc: DomainException) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


# Hey future me, these handlers are looked up by exception class MRO, so the most specific
# one wins: CatalogAuthError (a subclass of AuthenticationError) gets 502, not 401. Without
# them a domain exception would leak out as a bare 500.
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers that map domain exceptions to HTTP responses."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.warning(
            "Validation error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)

    @app.exception_handler(BusinessRuleViolation)
    async def business_rule_handler(
        request: Request, exc: BusinessRuleViolation
    ) -> JSONResponse:
        logger.warning("Business rule violated at %s: %s", request.url.path, exc.message)
        return _error(status.HTTP_400_BAD_REQUEST, exc)

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        logger.info("Unauthenticated request to %s", request.url.path)
        return _error(status.HTTP_401_UNAUTHORIZED, exc)

    @app.exception_handler(CatalogAuthError)
    async def catalog_auth_error_handler(
        request: Request, exc: CatalogAuthError
    ) -> JSONResponse:
        logger.error(
            "Catalog credential exchange failed at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "upstream_status": exc.http_status},
        )
        return _error(status.HTTP_502_BAD_GATEWAY, exc)

    @app.exception_handler(EntityNotFoundException)
    async def entity_not_found_handler(
        request: Request, exc: EntityNotFoundException
    ) -> JSONResponse:
        logger.info(
            "Entity not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
        )
        return _error(status.HTTP_404_NOT_FOUND, exc)

    @app.exception_handler(DuplicateEntityException)
    async def duplicate_entity_handler(
        request: Request, exc: DuplicateEntityException
    ) -> JSONResponse:
        logger.warning(
            "Duplicate entity at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
        )
        return _error(status.HTTP_409_CONFLICT, exc)

    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_handler(
        request: Request, exc: RateLimitExceededError
    ) -> JSONResponse:
        logger.warning("Catalog rate limit exhausted at %s", request.url.path)
        headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"detail": exc.message},
            headers=headers,
        )

    @app.exception_handler(ExternalServiceError)
    async def external_service_handler(
        request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        logger.warning(
            "Upstream failure at %s: %s",
            request.url.path,
            exc.message,
            extra={
                "path": request.url.path,
                "upstream_path": getattr(exc, "path", None),
                "upstream_status": getattr(exc, "http_status", None),
            },
        )
        return _error(status.HTTP_502_BAD_GATEWAY, exc)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error("Configuration error at %s: %s", request.url.path, exc.message)
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, exc)
