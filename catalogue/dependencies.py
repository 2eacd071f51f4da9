"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Common Dependency Patterns used here:
- Database sessions (per-request)
- Authentication (verify bearer token, load user)
- Authorization (active user, admin capability)
- Pagination and book filter parameters
- The borrowing ledger, built around the request's session
"""

from collections.abc import Callable
from datetime import datetime
from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from catalogue.config import get_settings
from catalogue.database import get_db
from catalogue.errors import Forbidden, Unauthorized
from catalogue.models import User
from catalogue.services.due_dates import utcnow
from catalogue.services.ledger import BorrowingLedger
from catalogue.services.security import read_access_token

settings = get_settings()

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def get_books(db: Session = Depends(get_db)):
#
# You can write:
#   def get_books(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Common pagination parameters for list endpoints.

    - page: Which page to return (1-indexed for user-friendliness)
    - per_page: How many items per page
    - skip: Calculated offset for database query
    """

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
        per_page: int = Query(
            default=20,
            ge=1,
            le=100,
            description="Number of items per page (max 100)",
            examples=[10, 20, 50],
        ),
    ) -> None:
        self.page = page
        self.per_page = per_page

    @property
    def skip(self) -> int:
        """
        Calculate the number of records to skip.

        Page 1 → skip 0 items
        Page 2 → skip per_page items
        """
        return (self.page - 1) * self.per_page


Pagination = Annotated[PaginationParams, Depends()]


# =============================================================================
# Book Search Filters
# =============================================================================
class BookSearchParams:
    """
    Search and filter parameters for the book list.

    Supports:
    - search: case-insensitive match on title, author or ISBN
    - genre: exact genre match
    - available: only books that are (or are not) on the shelf

    Usage:
        GET /api/v1/books/?search=orwell&genre=Dystopian&available=true
    """

    def __init__(
        self,
        search: str | None = Query(
            default=None,
            min_length=1,
            max_length=100,
            description="Search title, author and ISBN (partial, case-insensitive)",
            examples=["orwell", "9780451524935"],
        ),
        genre: str | None = Query(
            default=None,
            min_length=1,
            max_length=100,
            description="Filter by genre (exact match)",
            examples=["Fiction"],
        ),
        available: bool | None = Query(
            default=None,
            description="Filter by availability",
        ),
    ) -> None:
        self.search = search
        self.genre = genre
        self.available = available


BookFilters = Annotated[BookSearchParams, Depends()]


# =============================================================================
# JWT Authentication (User Authentication)
# =============================================================================
# HTTPBearer extracts the token from the "Authorization: Bearer <token>"
# header and adds the "Authorize" button to Swagger UI. auto_error=False
# lets a missing header raise our own Unauthorized.

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Extract and validate the current user from the JWT bearer token.

    This dependency:
    1. Extracts the Bearer token from Authorization header
    2. Decodes and validates the JWT
    3. Looks up the user in the database

    Raises:
        Unauthorized: 401 if token is missing, invalid or user not found
    """
    if credentials is None:
        raise Unauthorized("Access token required")

    user_id = read_access_token(credentials.credentials)
    if user_id is None:
        raise Unauthorized()

    user = db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if user is None:
        raise Unauthorized()

    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Verify the current user is active.

    Raises:
        Forbidden: 403 if user is inactive
    """
    if not current_user.is_active:
        raise Forbidden("Account is inactive")
    return current_user


def get_current_admin(
    current_user: User = Depends(get_current_active_user),
) -> User:
    """
    Verify the current user holds the admin capability.

    Use this dependency for catalogue edits and cross-user borrowing views.

    Raises:
        Forbidden: 403 if user is not an admin
    """
    if not current_user.is_admin:
        raise Forbidden("Admin access required")
    return current_user


CurrentUser = Annotated[User, Depends(get_current_user)]
ActiveUser = Annotated[User, Depends(get_current_active_user)]
AdminUser = Annotated[User, Depends(get_current_admin)]


# =============================================================================
# Borrowing Ledger
# =============================================================================
def get_clock() -> Callable[[], datetime]:
    """Time source for the ledger. Tests override this to travel in time."""
    return utcnow


def get_ledger(
    db: DbSession,
    clock: Callable[[], datetime] = Depends(get_clock),
) -> BorrowingLedger:
    """Build a BorrowingLedger around the request's database session."""
    return BorrowingLedger(db, clock=clock, loan_days=settings.loan_period_days)


Ledger = Annotated[BorrowingLedger, Depends(get_ledger)]
