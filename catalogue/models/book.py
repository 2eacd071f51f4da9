"""
Book Model

The catalogue record for a physical book.

Availability
============
`available` is a cached flag: it is False exactly when an active
borrowing (status="borrowed") references the book. Only the borrowing
ledger (services/ledger.py) writes it; the book endpoints never accept
it as input.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalogue.database import Base

if TYPE_CHECKING:
    from catalogue.models.borrowing import Borrowing


class Book(Base):
    """
    Book model representing books in the library.

    Table: books

    Fields:
    - title, author: required
    - isbn: International Standard Book Number (unique, stored without hyphens)
    - genre, publication_year, publisher, description, image_url: optional
    - available: whether the book can currently be borrowed

    Example:
        book = Book(
            title="1984",
            author="George Orwell",
            isbn="9780451524935",
            genre="Dystopian",
            publication_year=1949,
        )
    """

    __tablename__ = "books"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Basic Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(255),
        index=True,
        nullable=False,
        comment="Book title"
    )

    author: Mapped[str] = mapped_column(
        String(255),
        index=True,
        nullable=False,
        comment="Author name(s) as printed on the cover"
    )

    # Optional because older books might not have one
    isbn: Mapped[str | None] = mapped_column(
        String(20),
        unique=True,
        nullable=True,
        comment="International Standard Book Number"
    )

    genre: Mapped[str | None] = mapped_column(
        String(100),
        index=True,
        nullable=True,
    )

    publication_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    publisher: Mapped[str | None] = mapped_column(String(255), nullable=True)

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Book description or summary"
    )

    image_url: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Cover image URL"
    )

    # -------------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------------
    available: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="False while the book is out on loan"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    # Deleting a book removes its borrowing history
    borrowings: Mapped[list["Borrowing"]] = relationship(
        "Borrowing",
        back_populates="book",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title='{self.title}', available={self.available})"
