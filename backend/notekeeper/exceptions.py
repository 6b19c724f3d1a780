"""
Notekeeper Backend: Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) catch these
       and return structured JSON error responses with the right status code.
Who:   Raised by services and the access-control guard; caught by handlers.

Exception Hierarchy:
    NotekeeperError (base)
    ├── ValidationError          → 400 Bad Request
    ├── DuplicateEmailError      → 400 Bad Request
    ├── InvalidCredentialsError  → 400 Bad Request
    ├── MissingTokenError        → 401 Unauthorized
    ├── InvalidTokenError        → 403 Forbidden
    │   └── ExpiredTokenError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── DatabaseError            → 500 Internal Server Error
    └── ConfigurationError       → fatal at startup (never reaches a client)
"""

from typing import Any, Dict, Optional


class NotekeeperError(Exception):
    """
    Base exception for all Notekeeper application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only returned for 4xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotekeeperError):
    """
    Raised when client input fails a business rule.

    When:    Missing title/content, blank signup fields, malformed body.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Title and content are required",
            "details": {"fields": ["title"]}
        }
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


class DuplicateEmailError(NotekeeperError):
    """Signup with an email that already belongs to an account. HTTP 400."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="A user with this email already exists",
            context=context,
        )


class InvalidCredentialsError(NotekeeperError):
    """
    Login failed.

    The same message is used for an unknown email and for a wrong password
    so the response does not reveal which emails are registered.
    HTTP: 400 Bad Request
    """

    def __init__(self):
        super().__init__(message="Invalid email or password")


class MissingTokenError(NotekeeperError):
    """No bearer token on a protected request. HTTP 401."""

    def __init__(self, message: str = "Authentication token not provided"):
        super().__init__(message=message)


class InvalidTokenError(NotekeeperError):
    """
    Bearer token present but unusable.

    When:    Bad signature, malformed JWT, wrong Authorization scheme,
             subject claim that is not a user id.
    HTTP:    403 Forbidden
    """

    error_code = "invalid_token"

    def __init__(
        self,
        message: str = "Invalid authentication token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ExpiredTokenError(InvalidTokenError):
    """Token signature is valid but its `exp` claim has passed. HTTP 403."""

    error_code = "expired_token"

    def __init__(self):
        super().__init__(message="Authentication token has expired")


class NotFoundError(NotekeeperError):
    """
    Raised when a requested resource does not exist for the caller.

    A note owned by another user is reported exactly like a missing one,
    so note ids belonging to other accounts cannot be discovered.
    HTTP: 404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RateLimitExceededError(NotekeeperError):
    """
    Raised when a client exceeds the per-IP limit on credential endpoints.

    HTTP: 429 Too Many Requests, with a Retry-After header.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(NotekeeperError):
    """
    Raised when a store operation fails unexpectedly.

    The message returned to the client is always generic. SQL text,
    constraint names and driver errors are logged server-side only.
    HTTP: 500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(NotekeeperError):
    """Startup cannot continue (missing secret, unreachable store)."""
