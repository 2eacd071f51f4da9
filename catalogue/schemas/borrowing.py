"""
Borrowing Pydantic Schemas

Schemas:
- BorrowRequest: body of POST /borrowings/borrow
- BorrowingResponse: the loan record itself
- BorrowingWithBook: loan plus book metadata (my-books list)
- BorrowingDetail: loan plus book and borrower (admin list, single loan)
- BorrowingActionResponse: message plus loan, returned by borrow/return

All timestamps are rendered as timezone-aware UTC.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from catalogue.models.borrowing import BorrowingStatus
from catalogue.schemas.user import UserSummary
from catalogue.services.due_dates import ensure_utc, is_past_due


class BorrowRequest(BaseModel):
    """
    Request body for borrowing a book.

    book_id is optional at the schema level so a missing id is reported
    as 400 "Book ID is required" rather than a 422.
    """

    book_id: int | None = Field(
        default=None,
        description="ID of the book to borrow",
        examples=[42],
    )


class BookSummary(BaseModel):
    """Book fields shown next to a borrowing."""

    id: int
    title: str
    author: str
    isbn: str | None = None
    genre: str | None = None

    model_config = ConfigDict(from_attributes=True)


class BorrowingResponse(BaseModel):
    """A borrowing record."""

    id: int = Field(..., description="Borrowing identifier")
    user_id: int
    book_id: int
    borrowed_date: datetime
    due_date: datetime
    returned_date: datetime | None = None
    status: BorrowingStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 7,
                "user_id": 1,
                "book_id": 42,
                "borrowed_date": "2024-03-01T09:00:00Z",
                "due_date": "2024-03-15T09:00:00Z",
                "returned_date": None,
                "status": "borrowed",
                "is_past_due": False,
                "created_at": "2024-03-01T09:00:00Z",
                "updated_at": "2024-03-01T09:00:00Z",
            }
        },
    )

    @field_validator("borrowed_date", "due_date", "returned_date", "created_at", "updated_at")
    @classmethod
    def as_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else v

    @computed_field
    @property
    def is_past_due(self) -> bool:
        """
        True for a loan still out after its due date.

        Informational only: status stays "borrowed" until the book is
        returned.
        """
        return self.status == BorrowingStatus.BORROWED and is_past_due(self.due_date)


class BorrowingWithBook(BorrowingResponse):
    book: BookSummary


class BorrowingDetail(BorrowingWithBook):
    user: UserSummary


class BorrowingActionResponse(BaseModel):
    message: str
    borrowing: BorrowingResponse
