"""
Books Router

Catalogue endpoints for books.

- Reads are public: list (search, filters, pagination), genres, detail
- Writes (create, update, delete) require an admin account
- `available` is never accepted as input; the borrowing ledger owns it
"""

import logging
import math

from fastapi import APIRouter, Request, status
from sqlalchemy import func, or_, select

from catalogue.config import get_settings
from catalogue.database import transaction
from catalogue.dependencies import AdminUser, BookFilters, DbSession, Pagination
from catalogue.errors import Conflict, ConstraintViolation, NotFound
from catalogue.models import Book
from catalogue.schemas import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
)
from catalogue.services.rate_limiter import limiter

logger = logging.getLogger(__name__)
settings = get_settings()

# =============================================================================
# Router Configuration
# =============================================================================
router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"description": "Book not found"},
    },
)


# =============================================================================
# Helper Functions
# =============================================================================
def get_book_or_404(db: DbSession, book_id: int) -> Book:
    """
    Get a book by ID or raise NotFound.

    Raises:
        NotFound: 404 if book not found
    """
    book = db.execute(select(Book).where(Book.id == book_id)).scalar_one_or_none()

    if book is None:
        raise NotFound("Book not found")

    return book


def apply_book_filters(stmt, filters: BookFilters):
    """
    Apply search and filter parameters to a book query.

    - search: partial, case-insensitive match on title, author or ISBN
    - genre: exact genre
    - available: availability flag
    """
    if filters.search:
        search_term = f"%{filters.search.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Book.title).like(search_term),
                func.lower(Book.author).like(search_term),
                func.lower(Book.isbn).like(search_term),
            )
        )

    if filters.genre:
        stmt = stmt.where(Book.genre == filters.genre)

    if filters.available is not None:
        stmt = stmt.where(Book.available.is_(filters.available))

    return stmt


def save_book(db: DbSession, book: Book) -> Book:
    """Flush a new or changed book, reporting a duplicate ISBN as 409."""
    try:
        with transaction(db):
            db.add(book)
            db.flush()
    except ConstraintViolation as exc:
        if exc.constraint and "isbn" in exc.constraint:
            raise Conflict("ISBN already exists") from exc
        raise

    db.refresh(book)
    return book


# =============================================================================
# Read Endpoints
# =============================================================================
@router.get(
    "/",
    response_model=BookListResponse,
    summary="List books",
    description="Get a paginated list of books, newest first, with optional search and filters.",
)
@limiter.limit(settings.rate_limit_default)
def list_books(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    filters: BookFilters,
) -> BookListResponse:
    """
    List books with pagination and optional filtering.

    Examples:
        GET /api/v1/books/?search=orwell
        GET /api/v1/books/?genre=Fiction&available=true
    """
    base_stmt = apply_book_filters(select(Book), filters)

    count_stmt = select(func.count()).select_from(base_stmt.subquery())
    total = db.execute(count_stmt).scalar() or 0

    pages = math.ceil(total / pagination.per_page) if total > 0 else 0

    stmt = (
        base_stmt
        .order_by(Book.created_at.desc(), Book.id.desc())
        .offset(pagination.skip)
        .limit(pagination.per_page)
    )
    books = db.execute(stmt).scalars().all()

    return BookListResponse(
        items=[BookResponse.model_validate(book) for book in books],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


# Declared before /{book_id} so "meta" is not parsed as an id
@router.get(
    "/meta/genres",
    response_model=list[str],
    summary="List genres",
    description="Distinct genres present in the catalogue, sorted alphabetically.",
)
@limiter.limit(settings.rate_limit_default)
def list_genres(request: Request, db: DbSession) -> list[str]:
    stmt = (
        select(Book.genre)
        .where(Book.genre.is_not(None))
        .distinct()
        .order_by(Book.genre)
    )
    return list(db.execute(stmt).scalars().all())


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    summary="Get a book by ID",
)
@limiter.limit(settings.rate_limit_default)
def get_book(
    request: Request,
    book_id: int,
    db: DbSession,
) -> BookResponse:
    return BookResponse.model_validate(get_book_or_404(db, book_id))


# =============================================================================
# Admin Endpoints
# =============================================================================
@router.post(
    "/",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new book",
    description="Add a book to the catalogue. New books start available. Requires admin.",
)
@limiter.limit(settings.rate_limit_write)
def create_book(
    request: Request,
    book_data: BookCreate,
    db: DbSession,
    admin: AdminUser,
) -> BookResponse:
    """
    Create a new book.

    Raises:
        Conflict: 409 if the ISBN is already catalogued
    """
    book = Book(**book_data.model_dump(), available=True)
    book = save_book(db, book)

    logger.info(f"Book {book.id} created by admin {admin.id}")

    return BookResponse.model_validate(book)


@router.put(
    "/{book_id}",
    response_model=BookResponse,
    summary="Update a book",
    description="Update an existing book. Only provided fields change. Requires admin.",
)
@limiter.limit(settings.rate_limit_write)
def update_book(
    request: Request,
    book_id: int,
    book_data: BookUpdate,
    db: DbSession,
    admin: AdminUser,
) -> BookResponse:
    """
    Update an existing book.

    Uses PUT semantics with optional fields (PATCH-like behavior).

    Raises:
        NotFound: 404 if book not found
        Conflict: 409 if the new ISBN belongs to another book
    """
    book = get_book_or_404(db, book_id)

    # model_dump(exclude_unset=True) returns only fields that were set
    update_data = book_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(book, field, value)

    book = save_book(db, book)

    logger.info(f"Book {book_id} updated by admin {admin.id}")

    return BookResponse.model_validate(book)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a book",
    description="Permanently delete a book and its borrowing history. Requires admin.",
)
@limiter.limit(settings.rate_limit_write)
def delete_book(
    request: Request,
    book_id: int,
    db: DbSession,
    admin: AdminUser,
) -> None:
    """
    Delete a book.

    Returns 204 No Content on success. Borrowings referencing the
    book are removed by the ON DELETE CASCADE foreign key.
    """
    book = get_book_or_404(db, book_id)

    with transaction(db):
        db.delete(book)

    logger.info(f"Book {book_id} deleted by admin {admin.id}")
