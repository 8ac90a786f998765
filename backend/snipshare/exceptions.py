"""
SnipShare — Custom Exception Hierarchy
=======================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions let services stay free of HTTP concerns while the
       routes and global handlers decide whether to re-render a form or show
       an error page.
How:   Each exception class carries a message and optional context dict.
Who:   Raised by services and dependencies; caught per-handler or by the
       global handlers registered in main.py.

Exception Hierarchy:
    SnipShareError (base)
    ├── ValidationError          → form re-rendered with messages
    ├── InvalidCredentialsError  → login form re-rendered
    ├── DuplicateUsernameError   → register form re-rendered
    ├── NotFoundError            → 404 page
    ├── ForbiddenError           → 403 page
    ├── DatabaseError            → form re-rendered, or 500 page
    └── RateLimitExceededError   → 429 page
"""

from typing import Any, Dict, List, Optional


class SnipShareError(Exception):
    """
    Base exception for all SnipShare application errors.

    Attributes:
        message:  User-facing error description (safe to show on a page)
        context:  Additional debug info (logged but NOT rendered)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SnipShareError):
    """
    Raised when submitted form data fails validation.

    Carries every failed rule in `errors` so a form can list them all at once,
    not just the first one.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[str]] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors or [message]


class InvalidCredentialsError(SnipShareError):
    """
    Raised when a login attempt fails.

    The same message is used for an unknown username and a wrong password so
    the login form cannot be used to enumerate accounts.
    """

    def __init__(
        self,
        message: str = "Invalid login attempt.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateUsernameError(SnipShareError):
    """Raised when registration hits the unique constraint on `users.username`."""

    def __init__(
        self,
        message: str = "Username already exists.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SnipShareError):
    """
    Raised when a requested resource does not exist, or when a page that
    needs a logged-in user is requested without one.

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
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ForbiddenError(SnipShareError):
    """
    Raised when an authenticated user touches a snippet they do not own.

    HTTP: 403 Forbidden
    """

    def __init__(
        self,
        message: str = "Forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SnipShareError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message shown to the user is always generic. Driver details
        (SQL, constraint names) are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(SnipShareError):
    """
    Raised when a client exceeds the per-IP form submission limit.

    HTTP: 429 Too Many Requests, with a Retry-After header.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before trying again."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
