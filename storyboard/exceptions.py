"""
Storyboard Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       structured JSON error responses with the right HTTP status code.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    StoryboardError (base)
    ├── ValidationError              → 400 Bad Request
    ├── InvalidCredentialsError      → 401 Unauthorized (login rejected)
    ├── AuthenticationRequiredError  → 401 Unauthorized (no session)
    ├── NotFoundError                → 404 Not Found
    ├── FileStorageError             → 500 Internal Server Error
    └── DatabaseError                → 500 Internal Server Error

The two 401 errors carry different machine-readable codes
(`invalid_credentials` and `authentication_required`) so the client can tell
a failed login from an expired session.
"""

from typing import Any, Dict, Optional


class StoryboardError(Exception):
    """
    Base exception for all Storyboard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for 400s)
    """

    error_code = "server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StoryboardError):
    """
    Raised when client input fails validation.

    When:    Missing title/content, missing login fields, bad upload.
    HTTP:    400 Bad Request
    """

    error_code = "validation_error"
    status_code = 400

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


class InvalidCredentialsError(StoryboardError):
    """Raised when a login attempt does not match the configured account."""

    error_code = "invalid_credentials"
    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message)


class AuthenticationRequiredError(StoryboardError):
    """
    Raised by the auth gate when a protected route is called without an
    authenticated session.

    HTTP:    401 Unauthorized, error code `authentication_required`
    """

    error_code = "authentication_required"
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message)


class NotFoundError(StoryboardError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /api/parts/{id} with an unknown id, or a reorder
             batch naming an unknown id.
    HTTP:    404 Not Found
    """

    error_code = "not_found"
    status_code = 404

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


class FileStorageError(StoryboardError):
    """
    Raised when writing an uploaded file fails.

    HTTP:    500 Internal Server Error, generic message; the OS error is logged.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(StoryboardError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. SQL details
        are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
