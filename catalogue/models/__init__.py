"""
SQLAlchemy Models Package

Model Relationships:
- User <-> Borrowing: One-to-Many (a user has many loans)
- Book <-> Borrowing: One-to-Many (a book has a loan history)

Import all models here to:
1. Make them available as: from catalogue.models import Book, User
2. Ensure Alembic discovers them for migrations
3. Provide a single import point for the application
"""

from catalogue.models.user import User
from catalogue.models.book import Book
from catalogue.models.borrowing import Borrowing, BorrowingStatus

__all__ = [
    "User",
    "Book",
    "Borrowing",
    "BorrowingStatus",
]
