"""
Bookshelf — Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions for every outcome that is not a success.
How:   Each exception carries a client-safe message and an optional context
       dict. Handlers registered in main.py translate them into the
       `{"error": message}` envelope with the matching HTTP status.
Who:   Raised by the repository and the route handlers.

Exception Hierarchy:
    BookshelfError (base)
    ├── ValidationError   → 400 Bad Request (malformed JSON, empty field, bad id)
    ├── NotFoundError     → 404 Not Found
    └── DatabaseError     → 500 Internal Server Error (details logged only)

405 Method Not Allowed is produced by the router itself and only has its
envelope rewritten.
"""

from typing import Any, Dict, Optional


class BookshelfError(Exception):
    """
    Base exception for all Bookshelf application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BookshelfError):
    """
    Raised when client input fails validation.

    When:  Body is not valid JSON, title/author is missing or empty,
           or the path id is not a base-10 integer.
    HTTP:  400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "invalid request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BookshelfError):
    """
    Raised when no row matches the requested id.

    When:  GET, PUT or DELETE on /books/{id} for an id that does not exist.
    HTTP:  404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "book",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class DatabaseError(BookshelfError):
    """
    Raised when a database operation fails unexpectedly.

    When:  Connection lost, pool exhausted, statement timed out, driver error.
    HTTP:  500 Internal Server Error

    The message returned to the client is always generic. The driver error
    is kept in `context` and `__cause__` for the server-side log.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
