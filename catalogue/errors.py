"""
Domain Errors

Business-rule violations raised by services and routers. Each error
carries the HTTP status it maps to; main.py installs a single exception
handler that renders them as {"detail": message}.

Taxonomy:
- ValidationError (400): missing or malformed input
- NotFound (404): unknown id, or a loan the caller does not own
- Conflict (409): uniqueness clashes (ISBN, username, email)
    - BookUnavailable / DuplicateLoan / AlreadyReturned (400): ledger conflicts
- Forbidden (403): access to another user's record without admin rights
- Unauthorized (401): missing or invalid bearer token, bad login
- ConstraintViolation (409): typed wrapper around a database IntegrityError
"""

from fastapi import status


class LibraryError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An internal error occurred."
    # Extra response headers, e.g. WWW-Authenticate on a 401
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LibraryError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFound(LibraryError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class Forbidden(LibraryError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class Unauthorized(LibraryError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"
    headers = {"WWW-Authenticate": "Bearer"}


class Conflict(LibraryError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


# -------------------------------------------------------------------------
# Borrowing conflicts
# -------------------------------------------------------------------------
# The borrowing endpoints report these as 400 Bad Request.

class BookUnavailable(Conflict):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Book is not available"


class DuplicateLoan(Conflict):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "You have already borrowed this book"


class AlreadyReturned(Conflict):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Book has already been returned"


class ConstraintViolation(Conflict):
    """
    A database integrity constraint rejected a write.

    Raised by the storage layer (see database.translate_integrity_errors)
    so callers can branch on the constraint name instead of inspecting
    driver-specific error codes.
    """

    default_message = "Database constraint violated"

    def __init__(self, constraint: str | None = None, message: str | None = None) -> None:
        self.constraint = constraint
        super().__init__(message)
