"""
NoteShare Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for each failure class a workflow can hit.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching HTTP status.
Who:   Raised by services and the identity layer; caught by global handlers.

Exception Hierarchy:
    NoteShareError (base)
    ├── ValidationError          → 400 Bad Request (checked before any remote call)
    ├── AuthenticationError      → 401 Unauthorized
    ├── AuthorizationError       → 403 Forbidden (checked before any remote call)
    ├── NotFoundError            → 404 Not Found
    ├── RemoteFailure            → 500 Internal Server Error (generic message)
    │   ├── DatabaseError
    │   └── FileStorageError
    └── RateLimitExceededError   → 429 Too Many Requests

No exception here is retried automatically. Each is scoped to the single
request that raised it.
"""

from typing import Any, Dict, Optional


class NoteShareError(Exception):
    """
    Base exception for all NoteShare application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for remote failures)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteShareError):
    """
    Raised when client input fails validation.

    When:    Missing file in file mode, empty content in text mode, blank
             quick-add name, star value out of range, download of a note
             without a file.
    HTTP:    400 Bad Request
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


class AuthenticationError(NoteShareError):
    """
    Raised when a request carries no usable access token.

    When:    Missing bearer token, bad signature, expired or revoked token.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(NoteShareError):
    """
    Raised when the principal may not act on a resource.

    When:    Deleting a note owned by someone else.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NoteShareError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that into
    NotFoundError so the detail view can tell "missing" apart from "broken".
    HTTP:    404 Not Found
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


class RemoteFailure(NoteShareError):
    """
    Raised when the store or the blob store rejects an operation.

    The message is a generic per-action sentence. The original cause goes
    into `context` and the server log, never into the response.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "The operation could not be completed. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(RemoteFailure):
    """A database query, insert, upsert or delete failed."""

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(RemoteFailure):
    """
    A blob upload or download failed.

    When:    Disk full, permission denied, key already taken, blob missing.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(NoteShareError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
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
