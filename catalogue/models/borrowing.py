"""
Borrowing Model

A loan of one book to one user.

Lifecycle:
- Created with status "borrowed" when a user borrows an available book.
- Closed exactly once on return: status becomes "returned", or "overdue"
  if the book came back after its due date. Both are terminal.
- borrowed_date and due_date never change after creation.

Business Rules:
- At most one active ("borrowed") loan per user per book, enforced by a
  partial unique index
- Deleted only by cascade when the user or book is removed
"""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalogue.database import Base


class BorrowingStatus(str, Enum):
    """
    Status of a borrowing record.

    - BORROWED: the book is out (the only non-terminal status)
    - RETURNED: returned on or before the due date
    - OVERDUE: returned after the due date
    """
    BORROWED = "borrowed"
    RETURNED = "returned"
    OVERDUE = "overdue"


ACTIVE_LOAN_INDEX = "uq_borrowings_active_loan"


class Borrowing(Base):
    """
    Borrowing model linking a user to a book for a bounded period.

    Table: borrowings

    Attributes:
        id: Primary key
        user_id: Foreign key to users table
        book_id: Foreign key to books table
        borrowed_date: When the loan started
        due_date: borrowed_date + loan period
        returned_date: When the book came back (null while outstanding)
        status: borrowed / returned / overdue
        created_at: When the record was created
        updated_at: When the record was last updated
    """

    __tablename__ = "borrowings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Foreign keys
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Loan period
    borrowed_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    due_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    returned_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=BorrowingStatus.BORROWED.value,
        nullable=False,
        index=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    book = relationship("Book", back_populates="borrowings")
    user = relationship("User", back_populates="borrowings")

    # Constraints
    __table_args__ = (
        CheckConstraint(
            "status IN ('borrowed', 'returned', 'overdue')",
            name="ck_borrowing_status",
        ),
        # One active loan per user per book
        Index(
            ACTIVE_LOAN_INDEX,
            "user_id",
            "book_id",
            unique=True,
            postgresql_where=text("status = 'borrowed'"),
            sqlite_where=text("status = 'borrowed'"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status == BorrowingStatus.BORROWED.value

    def __repr__(self) -> str:
        return (
            f"<Borrowing(id={self.id}, user_id={self.user_id}, "
            f"book_id={self.book_id}, status={self.status})>"
        )
