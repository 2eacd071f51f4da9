"""
Borrowing Ledger

Owns the borrow/return state machine and keeps Book.available in step
with the set of active loans.

State machine:

    (none) --borrow--> borrowed --return--> returned   (on time)
                                 \\-return--> overdue    (after due_date)

returned and overdue are terminal.

Concurrency:
============
Borrow and return run their read-check-write sequence inside one
transaction (database.transaction). The row being changed is read with
SELECT ... FOR UPDATE, and the availability flip is a compare-and-set
UPDATE that must hit exactly one row. Two callers racing for the same
book therefore cannot both succeed: the loser sees the book unavailable
(or its UPDATE matches nothing) and gets BookUnavailable.

The session is injected, so the ledger never reaches for a global
connection. The clock is injected too, which lets tests return books
"after" their due date.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session, joinedload

from catalogue.database import transaction
from catalogue.errors import (
    AlreadyReturned,
    BookUnavailable,
    ConstraintViolation,
    DuplicateLoan,
    Forbidden,
    LibraryError,
    NotFound,
)
from catalogue.models import Book, Borrowing, BorrowingStatus, User
from catalogue.models.borrowing import ACTIVE_LOAN_INDEX
from catalogue.services.due_dates import (
    DEFAULT_LOAN_DAYS,
    classify,
    compute_due_date,
    utcnow,
)

logger = logging.getLogger(__name__)


class BorrowingLedger:
    """
    Borrow/return operations and loan queries.

    Args:
        session: Database session used for every statement
        clock: Returns the current time (timezone-aware UTC)
        loan_days: Length of a loan in days
    """

    def __init__(
        self,
        session: Session,
        clock: Callable[[], datetime] = utcnow,
        loan_days: int = DEFAULT_LOAN_DAYS,
    ) -> None:
        self.session = session
        self.clock = clock
        self.loan_days = loan_days

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------
    def borrow(self, user_id: int, book_id: int) -> Borrowing:
        """
        Lend a book to a user.

        Creates a loan with status "borrowed", due loan_days from now,
        and marks the book unavailable.

        Raises:
            NotFound: the book does not exist
            BookUnavailable: the book is out on loan
            DuplicateLoan: the user already has an active loan for this book
        """
        try:
            with transaction(self.session):
                book = self.session.execute(
                    select(Book).where(Book.id == book_id).with_for_update()
                ).scalar_one_or_none()

                if book is None:
                    raise NotFound("Book not found")
                if not book.available:
                    raise BookUnavailable()
                if self._active_loan_exists(user_id, book_id):
                    raise DuplicateLoan()

                claimed = self.session.execute(
                    update(Book)
                    .where(Book.id == book_id, Book.available.is_(True))
                    .values(available=False)
                    .execution_options(synchronize_session=False)
                )
                if claimed.rowcount != 1:
                    raise BookUnavailable()
                self.session.expire(book, ["available"])

                now = self.clock()
                borrowing = Borrowing(
                    user_id=user_id,
                    book_id=book_id,
                    borrowed_date=now,
                    due_date=compute_due_date(now, self.loan_days),
                    status=BorrowingStatus.BORROWED.value,
                    created_at=now,
                    updated_at=now,
                )
                self.session.add(borrowing)
                self.session.flush()
        except ConstraintViolation as exc:
            if exc.constraint == ACTIVE_LOAN_INDEX:
                logger.warning(f"Duplicate loan rejected: user={user_id} book={book_id}")
                raise DuplicateLoan() from exc
            raise
        except LibraryError as exc:
            logger.warning(f"Borrow rejected: user={user_id} book={book_id}: {exc.message}")
            raise

        logger.info(
            f"Book {book_id} borrowed by user {user_id} "
            f"(borrowing {borrowing.id}, due {borrowing.due_date})"
        )
        return borrowing

    def return_book(self, borrowing_id: int, acting_user_id: int) -> Borrowing:
        """
        Close a loan owned by the acting user.

        The final status is decided here, once: "overdue" if now is past
        the due date, otherwise "returned". The book becomes available.

        Raises:
            NotFound: no such loan, or it belongs to someone else
            AlreadyReturned: the loan is already closed
        """
        try:
            with transaction(self.session):
                borrowing = self.session.execute(
                    select(Borrowing)
                    .where(
                        Borrowing.id == borrowing_id,
                        Borrowing.user_id == acting_user_id,
                    )
                    .with_for_update()
                ).scalar_one_or_none()

                if borrowing is None:
                    raise NotFound("Borrowing record not found")
                if borrowing.status != BorrowingStatus.BORROWED.value:
                    raise AlreadyReturned()

                now = self.clock()
                final_status = classify(borrowing.due_date, now)

                closed = self.session.execute(
                    update(Borrowing)
                    .where(
                        Borrowing.id == borrowing_id,
                        Borrowing.status == BorrowingStatus.BORROWED.value,
                    )
                    .values(
                        returned_date=now,
                        status=final_status.value,
                        updated_at=now,
                    )
                    .execution_options(synchronize_session=False)
                )
                if closed.rowcount != 1:
                    raise AlreadyReturned()

                self.session.execute(
                    update(Book)
                    .where(Book.id == borrowing.book_id)
                    .values(available=True)
                    .execution_options(synchronize_session=False)
                )
                self.session.expire(borrowing)
        except LibraryError as exc:
            logger.warning(
                f"Return rejected: borrowing={borrowing_id} user={acting_user_id}: {exc.message}"
            )
            raise

        logger.info(
            f"Borrowing {borrowing_id} closed by user {acting_user_id} "
            f"with status {final_status.value}"
        )
        return borrowing

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------
    def list_for_user(self, user_id: int) -> list[Borrowing]:
        """All loans of one user with their books, most recent first."""
        stmt = (
            select(Borrowing)
            .options(joinedload(Borrowing.book))
            .where(Borrowing.user_id == user_id)
            .order_by(Borrowing.borrowed_date.desc(), Borrowing.id.desc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def list_all(self, acting_user: User) -> list[Borrowing]:
        """Every loan with user and book, most recent first. Admins only."""
        if not acting_user.is_admin:
            raise Forbidden("Admin access required")

        stmt = (
            select(Borrowing)
            .options(joinedload(Borrowing.book), joinedload(Borrowing.user))
            .order_by(Borrowing.borrowed_date.desc(), Borrowing.id.desc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def get(self, borrowing_id: int, acting_user: User) -> Borrowing:
        """
        One loan with user and book.

        Raises:
            NotFound: no such loan
            Forbidden: the caller is neither the borrower nor an admin
        """
        stmt = (
            select(Borrowing)
            .options(joinedload(Borrowing.book), joinedload(Borrowing.user))
            .where(Borrowing.id == borrowing_id)
        )
        borrowing = self.session.execute(stmt).scalar_one_or_none()

        if borrowing is None:
            raise NotFound("Borrowing record not found")
        if not acting_user.is_admin and borrowing.user_id != acting_user.id:
            raise Forbidden("Access denied")

        return borrowing

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _active_loan_exists(self, user_id: int, book_id: int) -> bool:
        stmt = select(Borrowing.id).where(
            Borrowing.user_id == user_id,
            Borrowing.book_id == book_id,
            Borrowing.status == BorrowingStatus.BORROWED.value,
        )
        return self.session.execute(stmt).first() is not None
