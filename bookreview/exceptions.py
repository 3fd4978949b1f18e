"""
Book Review Service — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the error taxonomy of the service.
How:   Each exception class carries a user-facing message and an optional
       context dict. Global exception handlers (registered in main.py) catch
       these and return structured JSON error responses.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    BookReviewError (base)
    ├── ValidationError      → 400 Bad Request (user can correct the input)
    ├── AuthenticationError  → 401 Unauthorized (access gate fallback)
    ├── NotFoundError        → 404 Not Found (with a recovery target)
    ├── AuthServiceError     → 503 Service Unavailable (auth provider failed)
    └── DatabaseError        → 500 Internal Server Error (backend request failed)

No failure is fatal to the process, and none is retried automatically.
Transient (network) and permanent (constraint) backend failures share the
same type; only the message differs when the backend supplies one.
"""

from typing import Any, Dict, Optional


class BookReviewError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where a handler says so)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BookReviewError):
    """
    Raised when user input fails a business rule before any backend request.

    When:    Empty review text, rating outside 1..5, missing book fields.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "All fields are required: title, author, genre.",
            "details": {"fields": ["author"]}
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


class AuthenticationError(BookReviewError):
    """
    Raised by the access gate when no authenticated session is present.

    The fallback payload (sign-in / sign-up prompt, or a caller-supplied one)
    travels with the exception so the handler can return it verbatim.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "You need to be logged in to access this feature.",
        fallback: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.fallback = fallback or {}


class NotFoundError(BookReviewError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/books/{id} with no matching row in the aggregated view.
    HTTP:    404 Not Found

    `recovery_url` is the navigation target the client offers to get back
    on track (the catalog for books).
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        recovery_url: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        if recovery_url:
            ctx["recovery_url"] = recovery_url
        super().__init__(message=message, context=ctx)
        self.recovery_url = recovery_url


class AuthServiceError(BookReviewError):
    """
    Raised when the external auth provider cannot answer.

    What:    Timeout, connection failure, or an unexpected status code.
    HTTP:    503 Service Unavailable

    A 401/403 from the provider is NOT this error: it means "no session"
    and resolves the gate to unauthenticated.
    """

    def __init__(
        self,
        message: str = "Authentication service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(BookReviewError):
    """
    Raised when a request against the relational backend fails.

    What:    A query, insert, or update failed (network, constraint, etc.).
    HTTP:    500 Internal Server Error

    `message` is always user-facing: either the descriptive text supplied by
    the backend (see `backend_message`) or the calling flow's generic
    fallback. Driver details stay in `context`.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


def backend_message(exc: BaseException, fallback: str) -> str:
    """
    Pick the message to surface for a failed backend request.

    SQLAlchemy wraps driver errors in DBAPIError with the driver exception
    on `.orig`; its first line is the backend's own description (e.g. the
    violated constraint). Anything else gets the flow's fallback.
    """
    orig = getattr(exc, "orig", None)
    if orig is not None:
        text = str(orig).strip().splitlines()
        if text and text[0]:
            return text[0]
    return fallback
