"""
Book Pydantic Schemas

Handles:
- ISBN validation (stored without hyphens)
- Title/author normalization
- Pagination for list responses

`available` appears only in responses. It is owned by the borrowing
ledger and cannot be set through the book endpoints.
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def clean_isbn(v: str | None) -> str | None:
    """
    Validate an ISBN-10 or ISBN-13 and strip hyphens/spaces.

    - ISBN-10: 9 digits followed by a digit or 'X'
    - ISBN-13: 13 digits
    """
    if v is None:
        return v

    cleaned = re.sub(r"[-\s]", "", v)

    if len(cleaned) == 10:
        if not re.match(r"^\d{9}[\dX]$", cleaned):
            raise ValueError(
                "Invalid ISBN-10 format. Must be 10 characters: "
                "9 digits followed by a digit or 'X'"
            )
    elif len(cleaned) == 13:
        if not cleaned.isdigit():
            raise ValueError("Invalid ISBN-13 format. Must be exactly 13 digits")
    else:
        raise ValueError("ISBN must be either 10 or 13 characters (excluding hyphens)")

    return cleaned


class BookBase(BaseModel):
    """Shared book fields with validation."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Book title",
        examples=["1984", "Pride and Prejudice"],
    )

    author: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Author name(s)",
        examples=["George Orwell"],
    )

    isbn: str | None = Field(
        default=None,
        max_length=20,
        description="ISBN-10 or ISBN-13",
        examples=["978-0451524935"],
    )

    genre: str | None = Field(
        default=None,
        max_length=100,
        examples=["Dystopian", "Romance"],
    )

    publication_year: int | None = Field(
        default=None,
        ge=1000,
        le=9999,
        description="Year of publication",
        examples=[1949],
    )

    publisher: str | None = Field(default=None, max_length=255)

    description: str | None = Field(
        default=None,
        max_length=5000,
        description="Book description or summary",
    )

    image_url: str | None = Field(
        default=None,
        max_length=500,
        description="Cover image URL",
    )

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str | None) -> str | None:
        return clean_isbn(v)

    @field_validator("title", "author")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        """Validate and normalize title/author."""
        if not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip()


class BookCreate(BookBase):
    """
    Schema for creating a new book. New books start available.

    Example request body:
    {
        "title": "1984",
        "author": "George Orwell",
        "isbn": "978-0451524935",
        "genre": "Dystopian"
    }
    """


class BookUpdate(BaseModel):
    """
    Schema for updating an existing book.

    All fields are optional for PATCH-style updates.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    author: str | None = Field(default=None, min_length=1, max_length=255)
    isbn: str | None = Field(default=None, max_length=20)
    genre: str | None = Field(default=None, max_length=100)
    publication_year: int | None = Field(default=None, ge=1000, le=9999)
    publisher: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    image_url: str | None = Field(default=None, max_length=500)

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str | None) -> str | None:
        return clean_isbn(v)

    @field_validator("title", "author")
    @classmethod
    def must_not_be_blank(cls, v: str | None) -> str | None:
        # Only runs for values the client actually sent
        if v is None:
            raise ValueError("Value cannot be null")
        if not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip()


class BookResponse(BookBase):
    """Schema for book responses."""

    id: int = Field(..., description="Unique identifier")
    available: bool = Field(..., description="Whether the book can be borrowed now")
    created_at: datetime = Field(..., description="When the book was created")
    updated_at: datetime = Field(..., description="When the book was last updated")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "1984",
                "author": "George Orwell",
                "isbn": "9780451524935",
                "genre": "Dystopian",
                "publication_year": 1949,
                "publisher": "Secker & Warburg",
                "description": "A dystopian novel about totalitarianism",
                "image_url": None,
                "available": True,
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class BookListResponse(BaseModel):
    """
    Schema for paginated book list responses.

    - total: Total number of books matching the query
    - page: Current page number
    - per_page: Number of items per page
    - pages: Total number of pages
    """

    items: list[BookResponse] = Field(..., description="List of books for this page")
    total: int = Field(..., ge=0, description="Total number of books")
    page: int = Field(..., ge=1, description="Current page number")
    per_page: int = Field(..., ge=1, le=100, description="Number of items per page")
    pages: int = Field(..., ge=0, description="Total number of pages")
