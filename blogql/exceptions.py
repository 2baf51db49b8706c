"""
BlogQL — Custom Exception Hierarchy
====================================

What:  Application-specific exceptions for every failure a resolver can report.
Why:   Each exception carries the HTTP-style status code and the optional
       structured payload that the error formatting layer turns into
       `{message, status, data}`.
How:   Services raise these; the GraphQL error formatter and the FastAPI
       exception handlers (registered in main.py) translate them.

Exception Hierarchy:
    BlogError (base)                 → 500
    ├── InvalidInputError            → 422 (carries field-level messages)
    ├── UnauthorizedError            → 401
    ├── ForbiddenError               → 403
    ├── NotFoundError                → 404
    ├── ConflictError                → 409
    ├── FileStorageError             → 500
    └── DatabaseError                → 500
"""

from typing import Any, Dict, List, Optional


class BlogError(Exception):
    """
    Base exception for all BlogQL application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        code:     Status code reported to the client
        data:     Optional structured payload returned to the client
        context:  Additional debug info (logged but NOT returned to client)
    """

    code: int = 500

    def __init__(
        self,
        message: str = "An error occurred",
        code: Optional[int] = None,
        data: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if code is not None:
            self.code = code
        self.data = data
        self.context = context or {}
        super().__init__(self.message)


class InvalidInputError(BlogError):
    """
    Raised by the validation gate when one or more fields fail.

    `data` holds every violation, e.g. [{"message": "E-Mail is invalid."}],
    so clients can show all problems at once.
    """

    code = 422

    def __init__(
        self,
        errors: List[Dict[str, Any]],
        message: str = "Invalid input",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, data=list(errors), context=context)

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return self.data or []


class UnauthorizedError(BlogError):
    """Missing or invalid credentials, or an acting identity that no longer exists."""

    code = 401

    def __init__(
        self,
        message: str = "Not authenticated!",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(BlogError):
    """Authenticated, but not allowed to touch this resource (not the creator)."""

    code = 403

    def __init__(
        self,
        message: str = "Not authorized!",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BlogError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that None
    into this exception so the formatter can report 404.
    """

    code = 404

    def __init__(
        self,
        message: str = "No post found!",
        resource: str = "post",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(BlogError):
    """Raised on duplicate registration (email already taken)."""

    code = 409

    def __init__(
        self,
        message: str = "User already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(BlogError):
    """
    Raised when file system operations fail.

    Recovery:
        - Log the error with full file path and OS error for debugging
        - Return generic message to client (don't expose file system paths)
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(BlogError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic. Details
    (SQL, constraint names) are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
