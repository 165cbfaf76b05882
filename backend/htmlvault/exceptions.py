"""
HTMLVault Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the error kinds the API reports.
How:   Each exception carries a client-facing message and an optional context
       dict. Global exception handlers (registered in main.py) catch these and
       return `{error, details?}` JSON bodies with the matching status code.
Who:   Raised by the content service; caught by the global handlers.

Exception Hierarchy:
    HTMLVaultError (base)
    ├── ValidationError   → 400 Bad Request (malformed, missing or empty input)
    ├── NotFoundError     → 404 Not Found   (no row matches the id)
    └── StorageError      → 500 Internal Server Error (any database failure)

Unmatched routes and uncaught exceptions are not modelled here; main.py
handles them directly (404 "Route not found" and 500 "Something went wrong!").
"""

from typing import Any, Dict, Optional


class HTMLVaultError(Exception):
    """
    Base exception for all HTMLVault application errors.

    Attributes:
        message:  User-facing error description (returned as `error`)
        context:  Additional debug info (logged, never returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(HTMLVaultError):
    """
    Raised when client input fails validation.

    When:    Missing/empty title or html, non-numeric id, unparseable body.
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


class NotFoundError(HTMLVaultError):
    """
    Raised when a requested content record does not exist.

    SQL statements with RETURNING yield no row for a missing id; the service
    converts that into this exception.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        message: str = "Content not found",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class StorageError(HTMLVaultError):
    """
    Raised when a database statement fails.

    What:    Connection lost, constraint violation, pool exhausted, etc.
    HTTP:    500 Internal Server Error

    `details` holds the driver's error text. It is only sent to the client
    outside production; the full context is always logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.details = details
