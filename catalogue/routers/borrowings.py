"""
Borrowings Router

HTTP surface of the borrowing ledger.

Endpoints:
- GET  /borrowings/my-books       loans of the current user
- GET  /borrowings                every loan (admin)
- POST /borrowings/borrow         borrow a book
- POST /borrowings/return/{id}    return a borrowed book
- GET  /borrowings/{id}           one loan (owner or admin)

All business rules live in services/ledger.py; this module only
translates between HTTP and ledger calls. Ledger errors are rendered
by the LibraryError handler in main.py.
"""

from fastapi import APIRouter, Request, status

from catalogue.config import get_settings
from catalogue.dependencies import ActiveUser, AdminUser, Ledger
from catalogue.errors import ValidationError
from catalogue.schemas.borrowing import (
    BorrowingActionResponse,
    BorrowingDetail,
    BorrowingResponse,
    BorrowingWithBook,
    BorrowRequest,
)
from catalogue.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/borrowings",
    tags=["Borrowings"],
    responses={
        401: {"description": "Authentication required"},
        404: {"description": "Borrowing or book not found"},
    },
)


# -------------------------------------------------------------------------
# Queries
# -------------------------------------------------------------------------
# Fixed paths are declared before /{borrowing_id}
@router.get(
    "/my-books",
    response_model=list[BorrowingWithBook],
    summary="List my borrowings",
    description="All loans of the current user with book details, most recent first.",
)
@limiter.limit(settings.rate_limit_default)
def list_my_borrowings(
    request: Request,
    current_user: ActiveUser,
    ledger: Ledger,
) -> list[BorrowingWithBook]:
    borrowings = ledger.list_for_user(current_user.id)
    return [BorrowingWithBook.model_validate(b) for b in borrowings]


@router.get(
    "",
    response_model=list[BorrowingDetail],
    summary="List all borrowings",
    description="Every loan with book and borrower details, most recent first. Requires admin.",
)
@limiter.limit(settings.rate_limit_default)
def list_all_borrowings(
    request: Request,
    admin: AdminUser,
    ledger: Ledger,
) -> list[BorrowingDetail]:
    borrowings = ledger.list_all(admin)
    return [BorrowingDetail.model_validate(b) for b in borrowings]


# -------------------------------------------------------------------------
# Commands
# -------------------------------------------------------------------------
@router.post(
    "/borrow",
    response_model=BorrowingActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Borrow a book",
    description="""
    Borrow an available book for the configured loan period (14 days by default).

    **Errors:**
    - 400: book_id missing, book already on loan, or you already hold it
    - 404: book does not exist
    """,
)
@limiter.limit(settings.rate_limit_write)
def borrow_book(
    request: Request,
    current_user: ActiveUser,
    ledger: Ledger,
    borrow_request: BorrowRequest | None = None,
) -> BorrowingActionResponse:
    if borrow_request is None or not borrow_request.book_id:
        raise ValidationError("Book ID is required")

    borrowing = ledger.borrow(current_user.id, borrow_request.book_id)

    return BorrowingActionResponse(
        message="Book borrowed successfully",
        borrowing=BorrowingResponse.model_validate(borrowing),
    )


@router.post(
    "/return/{borrowing_id}",
    response_model=BorrowingActionResponse,
    summary="Return a book",
    description="""
    Return a book you borrowed. The loan is closed as "returned", or
    "overdue" when it comes back after the due date.

    **Errors:**
    - 404: no such loan, or it is not yours
    - 400: already returned
    """,
)
@limiter.limit(settings.rate_limit_write)
def return_book(
    request: Request,
    borrowing_id: int,
    current_user: ActiveUser,
    ledger: Ledger,
) -> BorrowingActionResponse:
    borrowing = ledger.return_book(borrowing_id, current_user.id)

    return BorrowingActionResponse(
        message="Book returned successfully",
        borrowing=BorrowingResponse.model_validate(borrowing),
    )


@router.get(
    "/{borrowing_id}",
    response_model=BorrowingDetail,
    summary="Get a borrowing",
    description="One loan with book and borrower details. Owner or admin only.",
)
@limiter.limit(settings.rate_limit_default)
def get_borrowing(
    request: Request,
    borrowing_id: int,
    current_user: ActiveUser,
    ledger: Ledger,
) -> BorrowingDetail:
    return BorrowingDetail.model_validate(ledger.get(borrowing_id, current_user))
