"""
AEDCheck Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the service and HTTP layers.
Why:   Custom exceptions map cleanly onto HTTP status codes and keep
       internal details (SQL, stack traces) out of API responses.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers registered in main.py turn them into structured
       JSON error responses.
Who:   Raised by services, auth dependencies and startup code.

Exception Hierarchy:
    AEDCheckError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict (invalid state transition)
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── DatabaseError            → 500 Internal Server Error
    └── ConfigurationError       → raised at startup, aborts the app

Note:
    The access-scope core (aedcheck.access) never raises any of these for
    request data. It resolves malformed input to the most restrictive scope
    instead; only the service layer decides that a request is forbidden.
"""

from typing import Any, Dict, Optional


class AEDCheckError(Exception):
    """
    Base exception for all AEDCheck application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where the
                  handler explicitly allows it)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AEDCheckError):
    """
    Raised when client input fails a business rule.

    HTTP: 400 Bad Request. Schema-level problems are already answered with
    422 by FastAPI; this is for rules pydantic cannot express (e.g. a
    rejection without a reason, an unknown region label).
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(AEDCheckError):
    """
    Raised when the caller has no valid session.

    HTTP: 401 Unauthorized. Covers a missing bearer token, a bad signature,
    an expired token, and a token pointing at a missing or inactive profile.
    """

    def __init__(
        self,
        message: str = "Authentication is required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(AEDCheckError):
    """
    Raised when an authenticated caller is outside their access scope.

    HTTP: 403 Forbidden.
    """

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(AEDCheckError):
    """
    Raised when a requested resource does not exist.

    HTTP: 404 Not Found. SQLAlchemy returns None for missing rows; the
    service layer converts that None into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(AEDCheckError):
    """
    Raised when a state transition is not allowed.

    HTTP: 409 Conflict. Example: approving an inspection that was already
    rejected.
    """

    def __init__(
        self,
        message: str = "The resource is not in a state that allows this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(AEDCheckError):
    """
    Raised when database operations fail unexpectedly.

    HTTP: 500. The message returned to the client is always generic;
    detailed info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(AEDCheckError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP: 429 Too Many Requests, with a Retry-After header.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class ConfigurationError(AEDCheckError):
    """
    Raised at startup when a configuration artifact is invalid.

    Example: the region/city code table has duplicate codes or a city
    pointing at an unknown region. The application refuses to start.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
